"""Account registration and status: commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.account.account import Account, AccountRole
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Account")
class RegisterAccount:
    """Create a new account for a buyer, seller or admin."""

    email: String(required=True, max_length=255)
    name: String(required=True, max_length=100)
    role: String(max_length=20, default=AccountRole.BUYER.value)


@storefront.command(part_of="Account")
class SuspendAccount:
    account_id: Identifier(required=True)
    reason: String(required=True, max_length=500)


@storefront.command(part_of="Account")
class ReactivateAccount:
    account_id: Identifier(required=True)


@storefront.command_handler(part_of=Account)
class AccountStatusHandler:
    @handle(RegisterAccount)
    def register_account(self, command):
        account = Account.register(
            email=command.email,
            name=command.name,
            role=command.role or AccountRole.BUYER.value,
        )
        current_domain.repository_for(Account).add(account)
        logger.info("Account registered", account_id=str(account.id), role=account.role)
        return str(account.id)

    @handle(SuspendAccount)
    def suspend_account(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.suspend(command.reason)
        repo.add(account)
        logger.info("Account suspended", account_id=str(account.id))

    @handle(ReactivateAccount)
    def reactivate_account(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.reactivate()
        repo.add(account)
