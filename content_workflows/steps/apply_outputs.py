"""
Built-in step copying step outputs into content fields.

Earlier steps (AI assistants, mostly) leave their results under ``output.*``.
This step applies a list of actions that move such values into the post
title, body, excerpt, status, date or metadata.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..context.base import WorkflowContext
from ..exceptions import StepExecutionError
from .base import WorkflowStep

logger = logging.getLogger(__name__)

ACTION_TYPES = (
    "update_post_title",
    "update_post_content",
    "update_post_excerpt",
    "update_post_meta",
    "append_to_post_content",
    "prepend_to_post_content",
    "update_post_status",
    "update_post_date",
)

# Checked in order when an action names no source
AUTO_DETECT_KEYS = ("ai_response", "processed_content", "content", "assistant_response")

VALID_STATUSES = ("publish", "draft", "pending", "private", "trash", "future")

STATUS_ALIASES = {
    "publish": ("published", "public", "live"),
    "draft": ("drafted", "drafty"),
    "pending": ("pending review", "waiting for review"),
    "private": ("privat", "private post"),
    "future": ("scheduled", "schedule"),
    "trash": ("deleted", "move to trash"),
}

DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%Y.%m.%d",
    "%d.%m.%Y",
    "%m.%d.%Y",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S.%f",
)


def parse_post_status(value: Any) -> Optional[str]:
    """Normalise a free-form status ("Published", "'live'", ...) to a valid one."""
    if not value:
        return None

    status = str(value).strip(" \"'").lower()
    if status in VALID_STATUSES:
        return status

    for correct, variations in STATUS_ALIASES.items():
        if status in variations:
            return correct
    return None


def parse_post_date(value: Any) -> Optional[str]:
    """Parse a date in one of the accepted formats to ``YYYY-MM-DD HH:MM:SS``."""
    if not value:
        return None

    text = str(value).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).strftime("%Y-%m-%d %H:%M:%S")
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(text).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return None


def auto_detect_value(output: Any) -> Any:
    """Pick the main response from a step output dict."""
    if not isinstance(output, dict) or not output:
        return None
    for key in AUTO_DETECT_KEYS:
        if output.get(key) is not None:
            return output[key]
    return next(iter(output.values()))


def _as_text(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


class ApplyOutputsStep(WorkflowStep):
    """Apply output actions to the context document.

    Config::

        {
            "id": "apply_outputs",
            "actions": [
                {"type": "update_post_title", "source": "output.title"},
                {"type": "update_post_meta", "target": "seo_description"}
            ]
        }

    An action without ``source`` uses the auto-detected main response under
    ``output``. Every action is attempted; failed ones are reported together.
    """

    def get_id(self) -> str:
        return "apply_outputs"

    def get_name(self) -> str:
        return "Apply Outputs"

    def get_description(self) -> str:
        return "Writes step outputs into the post title, content, excerpt, status, date or meta fields."

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        actions = config.get("actions")
        if not isinstance(actions, list) or not actions:
            return ["actions must be a non-empty array"]

        errors = []
        for i, action in enumerate(actions):
            if not isinstance(action, dict):
                errors.append(f"Action {i}: must be an object")
                continue
            action_type = action.get("type")
            if not action_type:
                errors.append(f"Action {i}: Action type is required")
            elif action_type not in ACTION_TYPES:
                errors.append(f"Action {i}: Unknown action type: {action_type}")
            elif action_type == "update_post_meta" and not action.get("target"):
                errors.append(f"Action {i}: update_post_meta requires a target meta key")
        return errors

    def execute(self, context: WorkflowContext, config: Dict[str, Any]) -> None:
        failures = []

        for action in config.get("actions", []):
            error = self.apply_action(context, action)
            if error:
                failures.append(error)

        if failures:
            raise StepExecutionError("; ".join(failures), step_id=self.get_id())

    def apply_action(self, context: WorkflowContext, action: Dict[str, Any]) -> Optional[str]:
        """Apply one action.

        Returns:
            Error message, or None on success
        """
        action_type = action.get("type", "")
        source = action.get("source")

        if source:
            value = context.get(source)
            if value is None:
                return f'Source variable "{source}" not found in context'
        else:
            value = auto_detect_value(context.get("output"))
            if value is None:
                return "No response data available from previous steps"

        text = _as_text(value)

        if action_type == "update_post_title":
            context.set("post.title", text)
        elif action_type == "update_post_content":
            context.set("post.content", text)
        elif action_type == "update_post_excerpt":
            context.set("post.excerpt", text)
        elif action_type == "update_post_meta":
            context.set(f"meta.{action['target']}", text)
        elif action_type == "append_to_post_content":
            current = context.get("post.content") or ""
            context.set("post.content", f"{current}\n\n{text}" if current else text)
        elif action_type == "prepend_to_post_content":
            current = context.get("post.content") or ""
            context.set("post.content", f"{text}\n\n{current}" if current else text)
        elif action_type == "update_post_status":
            status = parse_post_status(text)
            if status is None:
                return (
                    f'Invalid post status: "{text}". '
                    f"Valid statuses are: {', '.join(VALID_STATUSES)}"
                )
            context.set("post.status", status)
        elif action_type == "update_post_date":
            date = parse_post_date(text)
            if date is None:
                return f'Invalid date format: "{text}". Please provide a valid date/time.'
            context.set("post.date", date)
        else:
            return f"Unknown action type: {action_type}"

        self.log(context, f"Applied {action_type}", "debug")
        return None
