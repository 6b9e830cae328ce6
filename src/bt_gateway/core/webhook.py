"""
Verification and decoding of webhook notifications.

The gateway posts two form fields: ``bt_payload`` (a base64 encoded XML
notification) and ``bt_signature``. The signature is a ``&`` separated
list of ``public_key|hex_digest`` pairs so that several key pairs can be
valid at once while keys are rotated. The digest is
``HMAC-SHA1(key=SHA1(private_key), message=payload)``.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Mapping, Optional, Tuple, Union
from xml.etree.ElementTree import Element
from xml.sax.saxutils import escape

from .documents import child_text, parse_document, strip_nil_elements
from .exceptions import DocumentError, SignatureError
from .records import (
    DailyReport,
    Disbursement,
    Dispute,
    MerchantAccount,
    PartnerMerchant,
    Subscription,
    Transaction,
)
from .timestamps import format_timestamp, parse_timestamp
from .validation import ErrorResponse

__all__ = [
    "Key",
    "Notification",
    "Subject",
    "parse_notification",
    "parse_request_form",
    "sample_notification",
]

CHECK = "check"
DISBURSEMENT = "disbursement"
DISBURSEMENT_EXCEPTION = "disbursement_exception"
SUBSCRIPTION_CANCELED = "subscription_canceled"
SUBSCRIPTION_CHARGED_SUCCESSFULLY = "subscription_charged_successfully"
SUBSCRIPTION_CHARGED_UNSUCCESSFULLY = "subscription_charged_unsuccessfully"
SUBSCRIPTION_EXPIRED = "subscription_expired"
SUBSCRIPTION_TRIAL_ENDED = "subscription_trial_ended"
SUBSCRIPTION_WENT_ACTIVE = "subscription_went_active"
SUBSCRIPTION_WENT_PAST_DUE = "subscription_went_past_due"
SUB_MERCHANT_ACCOUNT_APPROVED = "sub_merchant_account_approved"
SUB_MERCHANT_ACCOUNT_DECLINED = "sub_merchant_account_declined"
PARTNER_MERCHANT_CONNECTED = "partner_merchant_connected"
PARTNER_MERCHANT_DISCONNECTED = "partner_merchant_disconnected"
PARTNER_MERCHANT_DECLINED = "partner_merchant_declined"
TRANSACTION_SETTLED = "transaction_settled"
TRANSACTION_SETTLEMENT_DECLINED = "transaction_settlement_declined"
TRANSACTION_DISBURSED = "transaction_disbursed"
DISPUTE_OPENED = "dispute_opened"
DISPUTE_LOST = "dispute_lost"
DISPUTE_WON = "dispute_won"
ACCOUNT_UPDATER_DAILY_REPORT = "account_updater_daily_report"

SIGNATURE_FIELD = "bt_signature"
PAYLOAD_FIELD = "bt_payload"

Subject = Union[
    MerchantAccount,
    Disbursement,
    Dispute,
    Subscription,
    Transaction,
    DailyReport,
    PartnerMerchant,
    ErrorResponse,
]

_SUBSCRIPTION = ("subscription", Subscription.from_element)
_TRANSACTION = ("transaction", Transaction.from_element)
_DISBURSEMENT = ("disbursement", Disbursement.from_element)
_DISPUTE = ("dispute", Dispute.from_element)
_PARTNER_MERCHANT = ("partner-merchant", PartnerMerchant.from_element)

# kind -> (subject element, decoder)
_SUBJECT_DECODERS: Dict[str, Tuple[str, Callable[[Element], Subject]]] = {
    SUB_MERCHANT_ACCOUNT_APPROVED: ("merchant-account", MerchantAccount.from_element),
    SUB_MERCHANT_ACCOUNT_DECLINED: ("api-error-response", ErrorResponse.from_element),
    DISBURSEMENT: _DISBURSEMENT,
    DISBURSEMENT_EXCEPTION: _DISBURSEMENT,
    SUBSCRIPTION_CANCELED: _SUBSCRIPTION,
    SUBSCRIPTION_CHARGED_SUCCESSFULLY: _SUBSCRIPTION,
    SUBSCRIPTION_CHARGED_UNSUCCESSFULLY: _SUBSCRIPTION,
    SUBSCRIPTION_EXPIRED: _SUBSCRIPTION,
    SUBSCRIPTION_TRIAL_ENDED: _SUBSCRIPTION,
    SUBSCRIPTION_WENT_ACTIVE: _SUBSCRIPTION,
    SUBSCRIPTION_WENT_PAST_DUE: _SUBSCRIPTION,
    PARTNER_MERCHANT_CONNECTED: _PARTNER_MERCHANT,
    PARTNER_MERCHANT_DISCONNECTED: _PARTNER_MERCHANT,
    PARTNER_MERCHANT_DECLINED: _PARTNER_MERCHANT,
    TRANSACTION_SETTLED: _TRANSACTION,
    TRANSACTION_SETTLEMENT_DECLINED: _TRANSACTION,
    TRANSACTION_DISBURSED: _TRANSACTION,
    DISPUTE_OPENED: _DISPUTE,
    DISPUTE_LOST: _DISPUTE,
    DISPUTE_WON: _DISPUTE,
    ACCOUNT_UPDATER_DAILY_REPORT: ("account-updater-daily-report", DailyReport.from_element),
}


@dataclass(frozen=True)
class Key:
    public_key: str
    private_key: str

    def __repr__(self) -> str:
        return f"Key(public_key={self.public_key!r})"

    def hmac(self, payload: Union[str, bytes]) -> str:
        message = payload.encode("utf-8") if isinstance(payload, str) else payload
        secret = hashlib.sha1(self.private_key.encode("utf-8")).digest()
        return hmac.new(secret, message, hashlib.sha1).hexdigest()

    def sign(self, payload: Union[str, bytes]) -> str:
        return f"{self.public_key}|{self.hmac(payload)}"

    def verify_challenge(self, challenge: str) -> str:
        """Answer the gateway's endpoint verification challenge."""
        return self.sign(challenge)

    def parse_signature(self, signature_pairs: str) -> str:
        """Return the digest paired with this key's public key."""
        if "|" not in signature_pairs:
            raise SignatureError("Signature-key pair does not contain |")
        for pair in signature_pairs.split("&"):
            parts = pair.split("|")
            if len(parts) == 2 and parts[0] == self.public_key:
                return parts[1]
        raise SignatureError("Signature-key pair contains the wrong public key!")

    def verify_signature(self, signature_pairs: str, payload: Union[str, bytes]) -> bool:
        digest = self.parse_signature(signature_pairs)
        return hmac.compare_digest(self.hmac(payload).encode("utf-8"), digest.encode("utf-8"))


@dataclass(frozen=True)
class Notification:
    kind: str
    timestamp: Optional[datetime]
    subject: Optional[Subject] = None

    @classmethod
    def from_element(cls, element: Element) -> "Notification":
        kind = (child_text(element, "kind") or "").strip()
        raw_timestamp = (child_text(element, "timestamp") or "").strip()
        timestamp = parse_timestamp(raw_timestamp) if raw_timestamp else None

        subject: Optional[Subject] = None
        container = element.find("subject")
        entry = _SUBJECT_DECODERS.get(kind)
        if entry is None:
            logging.debug("No subject decoder for notification kind %r", kind)
        elif container is not None:
            tag, decode = entry
            found = container.find(tag)
            if found is not None:
                subject = decode(found)
        return cls(kind=kind, timestamp=timestamp, subject=subject)

    def _subject(self, kind: type) -> Optional[Subject]:
        return self.subject if isinstance(self.subject, kind) else None

    @property
    def error_response(self) -> Optional[ErrorResponse]:
        return self._subject(ErrorResponse)  # type: ignore[return-value]

    @property
    def merchant_account(self) -> Optional[MerchantAccount]:
        if self.error_response is not None and self.error_response.merchant_account is not None:
            return self.error_response.merchant_account
        return self._subject(MerchantAccount)  # type: ignore[return-value]

    @property
    def disbursement(self) -> Optional[Disbursement]:
        return self._subject(Disbursement)  # type: ignore[return-value]

    @property
    def dispute(self) -> Optional[Dispute]:
        return self._subject(Dispute)  # type: ignore[return-value]

    @property
    def subscription(self) -> Optional[Subscription]:
        return self._subject(Subscription)  # type: ignore[return-value]

    @property
    def transaction(self) -> Optional[Transaction]:
        return self._subject(Transaction)  # type: ignore[return-value]

    @property
    def daily_report(self) -> Optional[DailyReport]:
        return self._subject(DailyReport)  # type: ignore[return-value]

    @property
    def partner_merchant(self) -> Optional[PartnerMerchant]:
        return self._subject(PartnerMerchant)  # type: ignore[return-value]


def parse_notification(key: Key, signature: str, payload: str) -> Notification:
    """
    Verify ``signature`` against ``payload`` and decode the notification.

    Nothing is decoded unless the signature verifies.
    """
    if not key.verify_signature(signature, payload):
        logging.warning("Rejected webhook notification with a mismatched digest")
        raise SignatureError()

    try:
        # line breaks are the only characters skipped outside the alphabet
        raw = base64.b64decode(payload.replace("\r", "").replace("\n", ""), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DocumentError("webhook payload is not valid base64") from exc

    notification = Notification.from_element(parse_document(strip_nil_elements(raw)))
    logging.info("Accepted webhook notification of kind %s", notification.kind)
    return notification


def parse_request_form(key: Key, form: Mapping[str, str]) -> Notification:
    """Decode a notification from the posted form fields."""
    try:
        signature = form[SIGNATURE_FIELD]
        payload = form[PAYLOAD_FIELD]
    except KeyError as exc:
        raise SignatureError(f"missing form field {exc.args[0]}") from exc
    return parse_notification(key, signature, payload)


_NOTIFICATION_TEMPLATE = """<notification>
  <timestamp type="datetime">{timestamp}</timestamp>
  <kind>{kind}</kind>
  <subject>{subject}</subject>
</notification>
"""

_SAMPLE_SUBJECTS = {
    CHECK: '<check type="boolean">true</check>',
    SUB_MERCHANT_ACCOUNT_APPROVED: """
    <merchant-account>
      <id>{id}</id>
      <master-merchant-account>
        <id>master_ma_for_{id}</id>
        <status>active</status>
      </master-merchant-account>
      <status>active</status>
    </merchant-account>""",
    SUB_MERCHANT_ACCOUNT_DECLINED: """
    <api-error-response>
      <message>Credit score is too low</message>
      <errors>
        <errors type="array"/>
        <merchant-account>
          <errors type="array">
            <error>
              <code>82621</code>
              <message>Credit score is too low</message>
              <attribute type="symbol">base</attribute>
            </error>
          </errors>
        </merchant-account>
      </errors>
      <merchant-account>
        <id>{id}</id>
        <status>suspended</status>
        <master-merchant-account>
          <id>master_ma_for_{id}</id>
          <status>suspended</status>
        </master-merchant-account>
      </merchant-account>
    </api-error-response>""",
    SUBSCRIPTION_CHARGED_SUCCESSFULLY: """
    <subscription>
      <id>{id}</id>
      <transactions type="array">
        <transaction>
          <id>{id}</id>
          <status>submitted_for_settlement</status>
          <amount>49.99</amount>
        </transaction>
      </transactions>
      <add-ons type="array"/>
      <discounts type="array"/>
    </subscription>""",
    TRANSACTION_DISBURSED: """
    <transaction>
      <id>{id}</id>
      <amount>100</amount>
      <disbursement-details>
        <disbursement-date type="date">2013-07-09</disbursement-date>
      </disbursement-details>
    </transaction>""",
    TRANSACTION_SETTLED: """
    <transaction>
      <id>{id}</id>
      <status>settled</status>
      <type>sale</type>
      <currency-iso-code>USD</currency-iso-code>
      <amount>100.00</amount>
      <merchant-account-id>ogaotkivejpfayqfeaimuktty</merchant-account-id>
      <payment-instrument-type>us_bank_account</payment-instrument-type>
    </transaction>""",
    TRANSACTION_SETTLEMENT_DECLINED: """
    <transaction>
      <id>{id}</id>
      <status>settlement_declined</status>
      <type>sale</type>
      <currency-iso-code>USD</currency-iso-code>
      <amount>100.00</amount>
      <merchant-account-id>ogaotkivejpfayqfeaimuktty</merchant-account-id>
      <payment-instrument-type>us_bank_account</payment-instrument-type>
    </transaction>""",
    DISBURSEMENT: """
    <disbursement>
      <id>{id}</id>
      <transaction-ids type="array">
        <item>afv56j</item>
        <item>kj8hjk</item>
      </transaction-ids>
      <success type="boolean">true</success>
      <retry type="boolean">false</retry>
      <merchant-account>
        <id>merchant_account_token</id>
        <currency-iso-code>USD</currency-iso-code>
        <sub-merchant-account type="boolean">false</sub-merchant-account>
        <status>active</status>
      </merchant-account>
      <amount>100.00</amount>
      <disbursement-date type="date">2014-02-10</disbursement-date>
      <exception-message nil="true"/>
      <follow-up-action nil="true"/>
    </disbursement>""",
    DISBURSEMENT_EXCEPTION: """
    <disbursement>
      <id>{id}</id>
      <transaction-ids type="array">
        <item>afv56j</item>
        <item>kj8hjk</item>
      </transaction-ids>
      <success type="boolean">false</success>
      <retry type="boolean">false</retry>
      <merchant-account>
        <id>merchant_account_token</id>
        <currency-iso-code>USD</currency-iso-code>
        <sub-merchant-account type="boolean">false</sub-merchant-account>
        <status>active</status>
      </merchant-account>
      <amount>100.00</amount>
      <disbursement-date type="date">2014-02-10</disbursement-date>
      <exception-message>bank_rejected</exception-message>
      <follow-up-action>update_funding_information</follow-up-action>
    </disbursement>""",
    PARTNER_MERCHANT_CONNECTED: """
    <partner-merchant>
      <merchant-public-id>public_id</merchant-public-id>
      <public-key>public_key</public-key>
      <private-key>private_key</private-key>
      <partner-merchant-id>abc123</partner-merchant-id>
      <client-side-encryption-key>cse_key</client-side-encryption-key>
    </partner-merchant>""",
    PARTNER_MERCHANT_DISCONNECTED: """
    <partner-merchant>
      <partner-merchant-id>abc123</partner-merchant-id>
    </partner-merchant>""",
    PARTNER_MERCHANT_DECLINED: """
    <partner-merchant>
      <partner-merchant-id>abc123</partner-merchant-id>
    </partner-merchant>""",
    ACCOUNT_UPDATER_DAILY_REPORT: """
    <account-updater-daily-report>
      <report-date type="date">2020-01-01</report-date>
      <report-url>link-to-csv-report</report-url>
    </account-updater-daily-report>""",
}

_SAMPLE_DISPUTE = """
    <dispute>
      <amount>250.00</amount>
      <currency-iso-code>USD</currency-iso-code>
      <received-date type="date">2020-05-01</received-date>
      <reply-by-date type="date">2020-06-01</reply-by-date>
      <kind>chargeback</kind>
      <status>{status}</status>
      <reason>fraud</reason>
      <id>{{id}}</id>
      <transaction>
        <id>{{id}}</id>
        <amount>250.00</amount>
      </transaction>
      <date-opened type="date">2020-06-01</date-opened>
    </dispute>"""

_SAMPLE_SUBJECTS[DISPUTE_OPENED] = _SAMPLE_DISPUTE.format(status="open")
_SAMPLE_SUBJECTS[DISPUTE_LOST] = _SAMPLE_DISPUTE.format(status="lost")
_SAMPLE_SUBJECTS[DISPUTE_WON] = _SAMPLE_DISPUTE.format(status="won")

_SAMPLE_SUBSCRIPTION = """
    <subscription>
      <id>{id}</id>
      <transactions type="array"/>
      <add-ons type="array"/>
      <discounts type="array"/>
    </subscription>"""


def sample_notification(
    key: Key,
    kind: str,
    subject_id: str,
    *,
    now: Optional[datetime] = None,
) -> Tuple[str, str]:
    """
    Build a signed ``(signature, payload)`` pair for ``kind``.

    Useful for exercising a webhook receiver without the gateway. Kinds
    without a dedicated sample carry a subscription subject.
    """
    timestamp = format_timestamp(now or datetime.now(timezone.utc))
    subject = _SAMPLE_SUBJECTS.get(kind, _SAMPLE_SUBSCRIPTION).format(id=escape(subject_id))
    document = _NOTIFICATION_TEMPLATE.format(timestamp=timestamp, kind=kind, subject=subject)
    payload = base64.b64encode(document.encode("utf-8")).decode("ascii")
    return key.sign(payload), payload
