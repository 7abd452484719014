"""PayPal REST adapter for the two-phase capture flow.

1. An OAuth2 client-credentials token is fetched for every call.
2. ``create_intent`` creates a PayPal order with intent ``CAPTURE``; its id
   is the intent id the buyer approves in the PayPal popup.
3. ``capture_and_verify`` captures the approved order and reports PayPal's
   id, status, payer email and captured amount.

Every failure (timeout, connection error, non-2xx response) surfaces as a
``PaymentGatewayError`` whose ``detail`` carries PayPal's response text.
"""

import requests
import structlog

from ordering.errors import PaymentGatewayError
from payments.gateway.port import CaptureGateway, CaptureResult, PaymentIntent

logger = structlog.get_logger(__name__)

SANDBOX_API_URL = "https://api-m.sandbox.paypal.com"
DEFAULT_TIMEOUT_SECONDS = 10.0


class PayPalCaptureGateway(CaptureGateway):
    def __init__(
        self,
        client_id: str,
        app_secret: str,
        api_url: str = SANDBOX_API_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
        currency: str = "USD",
    ) -> None:
        self.client_id = client_id
        self.app_secret = app_secret
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.currency = currency

    # -------------------------------------------------------------------
    # HTTP plumbing
    # -------------------------------------------------------------------
    def _post(self, path: str, **kwargs) -> dict:
        url = f"{self.api_url}{path}"
        try:
            response = self.session.post(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("PayPal request failed", url=url, error=str(exc))
            raise PaymentGatewayError(detail=str(exc)) from exc
        return self._handle_response(response)

    def _handle_response(self, response) -> dict:
        if response.ok:
            try:
                return response.json()
            except ValueError as exc:
                raise PaymentGatewayError(detail="PayPal returned a non-JSON body") from exc

        logger.error("PayPal returned an error", status_code=response.status_code, detail=response.text)
        raise PaymentGatewayError(detail=f"{response.status_code}: {response.text}")

    def _access_token(self) -> str:
        data = self._post(
            "/v1/oauth2/token",
            auth=(self.client_id, self.app_secret),
            data={"grant_type": "client_credentials"},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        token = data.get("access_token")
        if not token:
            raise PaymentGatewayError(detail="PayPal token response had no access_token")
        return token

    def _authorized_post(self, path: str, json_body: dict | None = None) -> dict:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._access_token()}",
        }
        return self._post(path, json=json_body, headers=headers)

    # -------------------------------------------------------------------
    # CaptureGateway
    # -------------------------------------------------------------------
    def create_intent(self, amount: float, reference: str) -> PaymentIntent:
        data = self._authorized_post(
            "/v2/checkout/orders",
            {
                "intent": "CAPTURE",
                "purchase_units": [
                    {
                        "reference_id": reference,
                        "amount": {"currency_code": self.currency, "value": f"{amount:.2f}"},
                    }
                ],
            },
        )
        intent_id = data.get("id")
        if not intent_id:
            raise PaymentGatewayError(detail="PayPal order response had no id")
        return PaymentIntent(intent_id=intent_id, status=data.get("status"))

    def capture_and_verify(self, intent_id: str) -> CaptureResult:
        data = self._authorized_post(f"/v2/checkout/orders/{intent_id}/capture")

        captured_amount = None
        try:
            value = data["purchase_units"][0]["payments"]["captures"][0]["amount"]["value"]
            captured_amount = float(value)
        except (KeyError, IndexError, TypeError, ValueError):
            logger.warning("PayPal capture response had no captured amount", intent_id=intent_id)

        return CaptureResult(
            intent_id=data.get("id", ""),
            status=data.get("status", ""),
            payer_email=(data.get("payer") or {}).get("email_address"),
            captured_amount=captured_amount,
        )
