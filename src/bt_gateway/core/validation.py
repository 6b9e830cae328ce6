"""
Decoding of the validation errors returned inside ``api-error-response``.

The ``errors`` element mirrors the shape of the request that failed: every
level may hold a flat ``errors`` list of leaf failures plus any number of
nested objects, with array members keyed ``index-N``. Object names are
normalized to PascalCase (``line-items`` becomes ``LineItems``) so that
lookups read like the request model::

    response.errors.for_("Transaction").for_("LineItems").for_index(1).on("CommodityCode")

A lookup that finds nothing returns an empty node, never ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from xml.etree.ElementTree import Element

from .documents import child_text
from .records import MerchantAccount, Transaction

__all__ = [
    "ErrorResponse",
    "ValidationError",
    "ValidationErrors",
    "to_pascal_case",
]

_LEAF_LIST = "errors"


def to_pascal_case(name: str) -> str:
    """Convert ``kebab-case`` or ``snake_case`` names to ``PascalCase``."""
    parts = name.replace("-", "_").split("_")
    return "".join(part[:1].upper() + part[1:] for part in parts)


@dataclass(frozen=True)
class ValidationError:
    code: str
    attribute: str
    message: str

    @classmethod
    def from_element(cls, element: Element) -> "ValidationError":
        return cls(
            code=(child_text(element, "code") or "").strip(),
            attribute=to_pascal_case((child_text(element, "attribute") or "").strip()),
            message=(child_text(element, "message") or "").strip(),
        )


@dataclass
class ValidationErrors:
    object_name: str = ""
    errors: List[ValidationError] = field(default_factory=list)
    children: Dict[str, "ValidationErrors"] = field(default_factory=dict)

    @classmethod
    def from_element(cls, element: Element) -> "ValidationErrors":
        node = cls(object_name=to_pascal_case(element.tag))
        for child in element:
            if child.tag == _LEAF_LIST:
                node.errors = [
                    ValidationError.from_element(item) for item in child.findall("error")
                ]
            else:
                node.children[to_pascal_case(child.tag)] = cls.from_element(child)
        return node

    def all(self) -> List[ValidationError]:
        """Failures reported on this object only."""
        return list(self.errors)

    def all_deep(self) -> List[ValidationError]:
        """Failures on this object followed by every nested object, in document order."""
        collected = list(self.errors)
        for child in self.children.values():
            collected.extend(child.all_deep())
        return collected

    def for_(self, name: str) -> "ValidationErrors":
        key = to_pascal_case(name)
        child = self.children.get(key)
        return child if child is not None else ValidationErrors(object_name=key)

    def for_index(self, index: int) -> "ValidationErrors":
        return self.for_(f"Index{index}")

    def on(self, attribute: str) -> List[ValidationError]:
        wanted = to_pascal_case(attribute)
        return [error for error in self.errors if error.attribute == wanted]

    def __bool__(self) -> bool:
        return bool(self.errors or self.children)


@dataclass(frozen=True)
class ErrorResponse:
    message: str
    errors: ValidationErrors
    merchant_account: Optional[MerchantAccount] = None
    transaction: Optional[Transaction] = None

    @classmethod
    def from_element(cls, element: Element) -> "ErrorResponse":
        errors = element.find("errors")
        account = element.find("merchant-account")
        transaction = element.find("transaction")
        return cls(
            message=(child_text(element, "message") or "").strip(),
            errors=ValidationErrors.from_element(errors) if errors is not None else ValidationErrors(),
            merchant_account=MerchantAccount.from_element(account) if account is not None else None,
            transaction=Transaction.from_element(transaction) if transaction is not None else None,
        )
