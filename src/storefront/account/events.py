"""Domain events for the Account aggregate."""

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Account")
class AccountRegistered:
    """A new account was created."""

    __version__ = 1

    account_id: Identifier(required=True)
    email: String(required=True)
    name: String(required=True)
    role: String(required=True)
    registered_at: DateTime(required=True)


@storefront.event(part_of="Account")
class AccountSuspended:
    __version__ = 1

    account_id: Identifier(required=True)
    reason: String(required=True)
    suspended_at: DateTime(required=True)


@storefront.event(part_of="Account")
class AccountReactivated:
    __version__ = 1

    account_id: Identifier(required=True)
    reactivated_at: DateTime(required=True)


@storefront.event(part_of="Account")
class AddressAdded:
    """A shipping address was added to an account's address book."""

    __version__ = 1

    account_id: Identifier(required=True)
    address_id: Identifier(required=True)
    receiver_name: String(required=True)
    city: String(required=True)
    is_default: String(required=True)


@storefront.event(part_of="Account")
class AddressUpdated:
    __version__ = 1

    account_id: Identifier(required=True)
    address_id: Identifier(required=True)


@storefront.event(part_of="Account")
class AddressRemoved:
    __version__ = 1

    account_id: Identifier(required=True)
    address_id: Identifier(required=True)


@storefront.event(part_of="Account")
class DefaultAddressChanged:
    """The account's default shipping address changed."""

    __version__ = 1

    account_id: Identifier(required=True)
    address_id: Identifier(required=True)
    previous_default_address_id: Identifier()
