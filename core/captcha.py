"""Cloudflare Turnstile verification for public comment forms."""

import requests
from django.conf import settings
from loguru import logger

VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"
MAX_TOKEN_LENGTH = 2048


def verify_turnstile(token: str, remote_ip: str = "") -> bool:
    """
    Check a Turnstile response token with Cloudflare.

    Without a configured secret the check passes only when DEBUG is on, so
    local development works and a misconfigured production site fails closed.
    """
    secret = settings.TURNSTILE_SECRET_KEY
    if not secret:
        if settings.DEBUG:
            return True
        logger.error("TURNSTILE_SECRET_KEY is not configured; rejecting comment")
        return False

    if not token or len(token) > MAX_TOKEN_LENGTH:
        return False

    payload = {"secret": secret, "response": token}
    if remote_ip:
        payload["remoteip"] = remote_ip

    try:
        response = requests.post(VERIFY_URL, data=payload, timeout=10)
        response.raise_for_status()
        result = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("Turnstile verification request failed", error=str(e))
        return False

    if not result.get("success"):
        logger.info("Turnstile rejected token", errors=result.get("error-codes", []))
        return False
    return True
