"""Header construction for upstream requests."""


class HeaderBuilder:
    """Build upstream headers for different targets."""

    def build_airtable_headers(self, token: str) -> dict[str, str]:
        """Attach the server-held bearer token."""
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        }

    def build_webhook_headers(self) -> dict[str, str]:
        """Webhook URLs carry their own secret; no auth header is added."""
        return {"Content-Type": "application/json"}
