"""Account invites: provision an identity provider user and stage it."""

from devportal.config import CustomerTablesConfig
from devportal.errors import IdentityLookupAmbiguousError, IdentityProviderError, StoreError
from devportal.identity.cognito import IdentityProvider, subject_filter
from devportal.models.customer import IdentityUser, PreLoginAccount
from devportal.observability.logging import get_logger
from devportal.observability.metrics import track_account_invite
from devportal.storage.base import CustomerStore

logger = get_logger(__name__)


class AccountInviter:
    """
    Creates invited accounts on behalf of an existing portal user.

    InviterEmailAddress on the staging record is the e-mail attribute of the
    user found by inviter_user_sub. inviter_user_id is recorded instead only
    when that user has no e-mail attribute, so the two arguments are expected
    to agree for portal users who signed up with an e-mail.

    A user created at the identity provider is not removed if the staging
    write fails afterwards; the error is raised and the invite can be
    inspected or deleted with the deletion workflow.
    """

    def __init__(
        self,
        store: CustomerStore,
        identity_provider: IdentityProvider,
        tables: CustomerTablesConfig,
    ):
        self.store = store
        self.identity_provider = identity_provider
        self.tables = tables

    async def _find_inviter(self, inviter_user_sub: str) -> IdentityUser:
        filter_expression = subject_filter(inviter_user_sub)
        users = await self.identity_provider.list_users(self.tables.user_pool_id, filter_expression)
        if len(users) != 1:
            raise IdentityLookupAmbiguousError(filter_expression, len(users))
        return users[0]

    async def create_account_invite(
        self,
        target_email_address: str,
        inviter_user_id: str,
        inviter_user_sub: str,
    ) -> PreLoginAccount:
        """
        Invite target_email_address to the portal.

        Args:
            target_email_address: E-mail (and username) of the new account
            inviter_user_id: Inviter's username, recorded when the inviter has no e-mail
            inviter_user_sub: Inviter's user pool subject

        Returns:
            PreLoginAccount: The staging record written for the invitee

        Raises:
            IdentityLookupAmbiguousError: Inviter lookup matched zero or several users
            IdentityProviderError: User creation failed or returned no subject
            StoreWriteError: Staging record could not be written
        """
        try:
            inviter = await self._find_inviter(inviter_user_sub)

            created = await self.identity_provider.admin_create_user(
                self.tables.user_pool_id,
                target_email_address,
                {"email": target_email_address, "email_verified": "true"},
            )
            user_sub = created.sub or created.username
            if not user_sub:
                raise IdentityProviderError(
                    f"Created user for {target_email_address} has no subject id"
                )

            account = PreLoginAccount.invited(
                user_sub=user_sub,
                email_address=created.email or target_email_address,
                inviter_email_address=inviter.email or inviter_user_id,
                inviter_user_id=inviter_user_sub,
            )

            try:
                await self.store.put(self.tables.pre_login_accounts_table_name, account.to_item())
            except StoreError:
                logger.warning(
                    "Invited user left without staging record",
                    user_sub=user_sub,
                    target_email=target_email_address,
                )
                raise
        except (IdentityProviderError, StoreError) as e:
            track_account_invite(success=False)
            logger.error(
                "Account invite failed",
                target_email=target_email_address,
                inviter_sub=inviter_user_sub,
                exception_type=type(e).__name__,
                error=str(e),
            )
            raise

        track_account_invite(success=True)
        logger.info(
            "Account invite created",
            user_sub=user_sub,
            target_email=target_email_address,
            inviter_email=account.inviter_email_address,
        )
        return account
