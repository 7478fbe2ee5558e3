"""
boto3 client construction and instrumented call helper.

All adapters build their clients here so region, endpoint override (LocalStack,
DynamoDB Local), timeouts and botocore retry policy come from AWSConfig.
"""

import asyncio
import time
from typing import Any, Callable

import boto3
from botocore.config import Config

from devportal.config import AWSConfig
from devportal.observability.metrics import track_external_call


def _session_kwargs(service_name: str, aws_config: AWSConfig) -> dict[str, Any]:
    client_kwargs: dict[str, Any] = {
        "service_name": service_name,
        "region_name": aws_config.region,
        "config": Config(
            connect_timeout=aws_config.connect_timeout_seconds,
            read_timeout=aws_config.read_timeout_seconds,
            retries={"max_attempts": aws_config.max_attempts, "mode": "standard"},
        ),
    }
    if aws_config.endpoint_url:
        client_kwargs["endpoint_url"] = aws_config.endpoint_url
    return client_kwargs


def create_client(service_name: str, aws_config: AWSConfig):
    """Low-level boto3 client (cognito-idp, apigateway)."""
    return boto3.client(**_session_kwargs(service_name, aws_config))


def create_resource(service_name: str, aws_config: AWSConfig):
    """boto3 resource (dynamodb tables handle type marshalling)."""
    return boto3.resource(**_session_kwargs(service_name, aws_config))


async def call_aws(service: str, operation: str, fn: Callable[..., Any], **kwargs) -> Any:
    """
    Run a blocking boto3 call in a worker thread and record its latency.

    Exceptions propagate unchanged; callers translate them.
    """
    start = time.perf_counter()
    success = False
    try:
        result = await asyncio.to_thread(fn, **kwargs)
        success = True
        return result
    finally:
        track_external_call(service, operation, time.perf_counter() - start, success)
