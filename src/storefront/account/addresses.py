"""Address book management: commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.account.account import Account
from storefront.domain import storefront

_EDITABLE_FIELDS = (
    "receiver_name",
    "receiver_phone",
    "province",
    "city",
    "district",
    "street",
    "detail_address",
    "postal_code",
    "label",
)


@storefront.command(part_of="Account")
class AddAddress:
    """Add a shipping address to an account's address book."""

    account_id: Identifier(required=True)
    receiver_name: String(required=True, max_length=100)
    receiver_phone: String(required=True, max_length=20)
    province: String(required=True, max_length=50)
    city: String(required=True, max_length=50)
    district: String(required=True, max_length=50)
    street: String(required=True, max_length=200)
    detail_address: String(required=True, max_length=200)
    postal_code: String(max_length=10)
    label: String(max_length=20)
    is_default: Boolean(default=False)


@storefront.command(part_of="Account")
class UpdateAddress:
    """Modify fields of an existing address."""

    account_id: Identifier(required=True)
    address_id: Identifier(required=True)
    receiver_name: String(max_length=100)
    receiver_phone: String(max_length=20)
    province: String(max_length=50)
    city: String(max_length=50)
    district: String(max_length=50)
    street: String(max_length=200)
    detail_address: String(max_length=200)
    postal_code: String(max_length=10)
    label: String(max_length=20)
    is_default: Boolean()


@storefront.command(part_of="Account")
class RemoveAddress:
    account_id: Identifier(required=True)
    address_id: Identifier(required=True)


@storefront.command(part_of="Account")
class SetDefaultAddress:
    account_id: Identifier(required=True)
    address_id: Identifier(required=True)


@storefront.command_handler(part_of=Account)
class ManageAddressesHandler:
    @handle(AddAddress)
    def add_address(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)

        kwargs = {}
        for field in _EDITABLE_FIELDS:
            value = getattr(command, field, None)
            if value is not None:
                kwargs[field] = value

        address = account.add_address(is_default=bool(command.is_default), **kwargs)
        repo.add(account)
        return str(address.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)

        updates = {}
        for field in (*_EDITABLE_FIELDS, "is_default"):
            value = getattr(command, field, None)
            if value is not None:
                updates[field] = value

        account.update_address(command.address_id, **updates)
        repo.add(account)

    @handle(RemoveAddress)
    def remove_address(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.remove_address(command.address_id)
        repo.add(account)

    @handle(SetDefaultAddress)
    def set_default_address(self, command):
        repo = current_domain.repository_for(Account)
        account = repo.get(command.account_id)
        account.set_default_address(command.address_id)
        repo.add(account)
