# -*- coding: utf-8 -*-
"""Utility modules."""

from slack_log_handler.utils.validation import is_webhook_url, mask_webhook_url

__all__ = ["is_webhook_url", "mask_webhook_url"]
