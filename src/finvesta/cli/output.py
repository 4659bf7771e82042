"""CLI output helpers."""

import json
from decimal import Decimal
from typing import Any

import click


def format_money(value: Decimal, currency: str = "") -> str:
    text = f"{value:,.2f}"
    return f"{text} {currency}" if currency else text


def echo_json(payload: Any) -> None:
    """Print application payloads as JSON. Dates, datetimes and Decimals become strings."""
    click.echo(json.dumps(payload, indent=2, default=str))
