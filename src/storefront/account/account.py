"""Account aggregate root with its Address book.

An account is the acting user of every storefront operation. Buyers own carts
and orders, sellers own products, admins may act on any order. The address
book lives inside the account so the "at most one default address" rule is
enforced within a single transactional boundary.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, String

from storefront.domain import storefront


class AccountRole(Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


class AccountStatus(Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


_ADDRESS_FIELDS = (
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


@storefront.entity(part_of="Account")
class Address:
    """A shipping destination in an account's address book."""

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
    created_at: DateTime(default=datetime.now)

    def snapshot(self) -> dict:
        """Field-by-field copy used to freeze the address onto an order."""
        return {
            "receiver_name": self.receiver_name,
            "receiver_phone": self.receiver_phone,
            "province": self.province,
            "city": self.city,
            "district": self.district,
            "street": self.street,
            "detail_address": self.detail_address,
            "postal_code": self.postal_code,
        }


@storefront.aggregate
class Account:
    """A registered user of the storefront."""

    email: String(required=True, max_length=255, unique=True)
    name: String(required=True, max_length=100)
    role: String(choices=AccountRole, default=AccountRole.BUYER.value)
    status: String(choices=AccountStatus, default=AccountStatus.ACTIVE.value)
    addresses: HasMany(Address)
    registered_at: DateTime(default=datetime.now)

    @invariant.post
    def at_most_one_default_address(self):
        defaults = [a for a in self.addresses if a.is_default]
        if len(defaults) > 1:
            raise ValidationError({"addresses": ["Only one address can be marked as default"]})

    @classmethod
    def register(cls, email, name, role=AccountRole.BUYER.value):
        from storefront.account.events import AccountRegistered

        now = datetime.now(UTC)
        account = cls(email=email, name=name, role=role, registered_at=now)
        account.raise_(
            AccountRegistered(
                account_id=account.id,
                email=email,
                name=name,
                role=role,
                registered_at=now,
            )
        )
        return account

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE.value

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN.value

    # -------------------------------------------------------------------
    # Address book
    # -------------------------------------------------------------------
    def find_address(self, address_id):
        return next((a for a in self.addresses if str(a.id) == str(address_id)), None)

    def default_address(self):
        return next((a for a in self.addresses if a.is_default), None)

    def _get_address(self, address_id):
        address = self.find_address(address_id)
        if address is None:
            raise ValidationError({"addresses": [f"Address {address_id} not found"]})
        return address

    def add_address(self, is_default=False, **fields):
        from storefront.account.events import AddressAdded

        # First address is always default
        if not self.addresses:
            is_default = True

        with atomic_change(self):
            if is_default:
                for addr in self.addresses:
                    if addr.is_default:
                        addr.is_default = False

            address = Address(
                is_default=is_default,
                **{k: v for k, v in fields.items() if k in _ADDRESS_FIELDS},
            )
            self.add_addresses(address)

        self.raise_(
            AddressAdded(
                account_id=self.id,
                address_id=address.id,
                receiver_name=address.receiver_name,
                city=address.city,
                is_default=str(is_default),
            )
        )
        return address

    def update_address(self, address_id, **kwargs):
        from storefront.account.events import AddressUpdated

        address = self._get_address(address_id)
        make_default = kwargs.pop("is_default", None)

        with atomic_change(self):
            for field, value in kwargs.items():
                if field in _ADDRESS_FIELDS:
                    setattr(address, field, value)
            if make_default:
                for addr in self.addresses:
                    if addr.is_default and addr is not address:
                        addr.is_default = False
                address.is_default = True
            elif make_default is False:
                address.is_default = False

        self.raise_(AddressUpdated(account_id=self.id, address_id=address.id))

    def remove_address(self, address_id):
        from storefront.account.events import AddressRemoved

        address = self._get_address(address_id)
        was_default = address.is_default

        with atomic_change(self):
            self.remove_addresses(address)

            # If removed address was default, promote the first remaining one
            if was_default and self.addresses:
                self.addresses[0].is_default = True

        self.raise_(AddressRemoved(account_id=self.id, address_id=address.id))

    def set_default_address(self, address_id):
        from storefront.account.events import DefaultAddressChanged

        address = self._get_address(address_id)
        previous_default = self.default_address()
        previous_default_id = previous_default.id if previous_default else None

        with atomic_change(self):
            for addr in self.addresses:
                if addr.is_default:
                    addr.is_default = False
            address.is_default = True

        self.raise_(
            DefaultAddressChanged(
                account_id=self.id,
                address_id=address.id,
                previous_default_address_id=previous_default_id,
            )
        )

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    def suspend(self, reason):
        from storefront.account.events import AccountSuspended

        if not self.is_active:
            raise ValidationError({"status": ["Only active accounts can be suspended"]})

        self.status = AccountStatus.SUSPENDED.value
        self.raise_(
            AccountSuspended(
                account_id=self.id,
                reason=reason,
                suspended_at=datetime.now(UTC),
            )
        )

    def reactivate(self):
        from storefront.account.events import AccountReactivated

        if self.is_active:
            raise ValidationError({"status": ["Account is already active"]})

        self.status = AccountStatus.ACTIVE.value
        self.raise_(
            AccountReactivated(
                account_id=self.id,
                reactivated_at=datetime.now(UTC),
            )
        )
