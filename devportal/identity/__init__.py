"""Identity provider (Cognito user pool) access."""

from devportal.identity.cognito import CognitoIdentityProvider, IdentityProvider, subject_filter

__all__ = ["CognitoIdentityProvider", "IdentityProvider", "subject_filter"]
