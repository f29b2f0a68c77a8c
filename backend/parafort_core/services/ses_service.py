"""Transactional email over Amazon SES.

Both senders are synchronous boto3 calls; async callers wrap them in
``asyncio.to_thread``. Delivery failures surface as ``ClientError`` or
``BotoCoreError`` and are translated by the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import boto3
from botocore.exceptions import ClientError

from parafort_core.core.config import get_settings

logger = logging.getLogger(__name__)

BRAND_COLOR = "#10b981"

VERIFICATION_TEMPLATE = """\
<html><body style="font-family:Arial,sans-serif;max-width:600px;margin:0 auto;">
<h2>Verify your email for ParaFort</h2>
<p style="font-size:32px;font-weight:bold;letter-spacing:8px;color:{color};">{code}</p>
<p>This code expires in {minutes} minutes.</p>
<p style="color:#718096;font-size:12px;">If you did not start a ParaFort order you can ignore this email.</p>
</body></html>"""

ORDER_CONFIRMATION_TEMPLATE = """\
<html><body style="font-family:Arial,sans-serif;max-width:600px;margin:0 auto;">
<h2 style="color:{color};">Your order is confirmed</h2>
<p>Hi {customer_name},</p>
<p>We received your payment of <strong>${total_amount}</strong> for <strong>{business_name}</strong>.</p>
<p>Order number: <strong>{order_id}</strong></p>
<p><a href="{dashboard_url}" style="background:{color};color:white;padding:12px 24px;text-decoration:none;border-radius:4px;">Track your order</a></p>
<p style="color:#718096;font-size:12px;">Questions? Reply to this email or contact {support_email}.</p>
</body></html>"""


def _content(data: str) -> dict[str, str]:
    return {"Data": data, "Charset": "UTF-8"}


@dataclass
class OutboundEmail:
    recipient: str
    subject: str
    html: str
    text: str = ""
    category: str = "transactional"
    reply_to: list[str] = field(default_factory=list)

    def to_ses_params(self, *, source: str, configuration_set: str) -> dict[str, Any]:
        body = {"Html": _content(self.html)}
        if self.text:
            body["Text"] = _content(self.text)
        params: dict[str, Any] = {
            "Source": source,
            "Destination": {"ToAddresses": [self.recipient]},
            "Message": {"Subject": _content(self.subject), "Body": body},
            "Tags": [{"Name": "category", "Value": self.category}],
        }
        if self.reply_to:
            params["ReplyToAddresses"] = self.reply_to
        if configuration_set:
            params["ConfigurationSetName"] = configuration_set
        return params


class SesService:
    def __init__(self) -> None:
        settings = get_settings()
        self.from_email = settings.ses_from_email
        self.support_email = settings.support_email
        self.configuration_set = settings.ses_configuration_set
        self.region = settings.aws_region or "us-east-1"
        self._client = None

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("ses", region_name=self.region)
        return self._client

    def send(self, email: OutboundEmail) -> str:
        params = email.to_ses_params(source=self.from_email, configuration_set=self.configuration_set)
        try:
            response = self.client.send_email(**params)
        except ClientError as exc:
            logger.error("ses_send_failed category=%s error=%s", email.category, exc.response.get("Error", {}).get("Code"))
            raise
        message_id = response.get("MessageId", "")
        logger.info("ses_email_sent category=%s message_id=%s", email.category, message_id)
        return message_id

    def send_verification_code(self, email: str, code: str, expires_minutes: int = 10) -> str:
        return self.send(
            OutboundEmail(
                recipient=email,
                subject="Your ParaFort verification code",
                html=VERIFICATION_TEMPLATE.format(color=BRAND_COLOR, code=code, minutes=expires_minutes),
                text=f"Your ParaFort verification code: {code} (expires in {expires_minutes} minutes)",
                category="email_verification",
            )
        )

    def send_order_confirmation(
        self,
        *,
        email: str,
        customer_name: str,
        order_id: str,
        business_name: str,
        total_amount: str,
        dashboard_url: str,
    ) -> str:
        html = ORDER_CONFIRMATION_TEMPLATE.format(
            color=BRAND_COLOR,
            customer_name=customer_name,
            total_amount=total_amount,
            business_name=business_name,
            order_id=order_id,
            dashboard_url=dashboard_url,
            support_email=self.support_email,
        )
        return self.send(
            OutboundEmail(
                recipient=email,
                subject=f"ParaFort order {order_id} confirmed",
                html=html,
                text=f"Order {order_id} for {business_name} is confirmed. Track it at {dashboard_url}",
                category="order_confirmation",
                reply_to=[self.support_email],
            )
        )


_ses_instance: SesService | None = None


def get_ses_service() -> SesService:
    global _ses_instance
    if _ses_instance is None:
        _ses_instance = SesService()
    return _ses_instance
