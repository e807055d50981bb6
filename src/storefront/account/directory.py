"""Read access to accounts and their address books for the order flows."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.account.account import Account, Address
from storefront.shared.errors import ErrorKind, StorefrontError


class UserDirectory:
    """Resolves the acting user and the addresses they own."""

    def resolve_user(self, user_id) -> Account:
        try:
            account = current_domain.repository_for(Account).get(user_id)
        except ObjectNotFoundError:
            raise StorefrontError(ErrorKind.NOT_FOUND, f"Account {user_id} not found", user_id=user_id)

        if not account.is_active:
            raise StorefrontError(ErrorKind.ACCOUNT_INACTIVE, user_id=user_id)
        return account

    def find_owned_address(self, address_id, user_id) -> Address | None:
        """Return the address only when it belongs to ``user_id``."""
        if not address_id or not user_id:
            return None
        try:
            account = current_domain.repository_for(Account).get(user_id)
        except ObjectNotFoundError:
            return None
        return account.find_address(address_id)
