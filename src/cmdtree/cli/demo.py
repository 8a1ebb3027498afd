"""Sample command tree served by the ``cmdtree`` console script.

The hierarchy is small but uses every node feature::

    cmdtree [--offline] [--quiet]
        account view-account-summary --account-id ID
            network-config {testnet | mainnet | custom --url URL}
                {now | at-block-height --height N}
        config show-settings

Leaf actions only render the context they receive; no network request
is made.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from typing import Any

from cmdtree.cli import exit_codes
from cmdtree.cli.console import console
from cmdtree.config import Settings
from cmdtree.core.models import Scope
from cmdtree.core.nodes import (
    ChoiceNode,
    Field,
    FieldKind,
    NamedArg,
    SequenceNode,
    Subcommand,
    Variant,
)
from cmdtree.core.tree import CommandTree
from cmdtree.exceptions import LeafActionError, ValidationError

PRESET_RPC_URLS: dict[str, str] = {
    "testnet": "https://rpc.testnet.near.org",
    "mainnet": "https://rpc.mainnet.near.org",
}

_ACCOUNT_ID_RE = re.compile(r"^(([a-z\d]+[-_])*[a-z\d]+\.)*([a-z\d]+[-_])*[a-z\d]+$")


# ---------------------------------------------------------------------------
# Contexts
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class GlobalContext:
    settings: Settings
    offline: bool
    quiet: bool


@dataclass(frozen=True, slots=True)
class AccountContext:
    global_context: GlobalContext
    account_id: str


@dataclass(frozen=True, slots=True)
class NetworkSelection:
    account: AccountContext
    network: str


@dataclass(frozen=True, slots=True)
class NetworkContext:
    account: AccountContext
    network: str
    rpc_url: str


@dataclass(frozen=True, slots=True)
class ViewRequest:
    """Everything the account summary view needs."""

    network: NetworkContext
    block_height: int | None
    """``None`` means the latest final block."""


# ---------------------------------------------------------------------------
# Field parsers and checks
# ---------------------------------------------------------------------------

def parse_account_id(text: str) -> str:
    """Return *text* stripped; raise ``ValueError`` if it is not an account id."""
    account_id = text.strip()
    if not 2 <= len(account_id) <= 64 or not _ACCOUNT_ID_RE.match(account_id):
        raise ValueError(f"{account_id!r} is not a valid account id")
    return account_id


def validate_rpc_url(url: str) -> None:
    """Raise :class:`ValidationError` for empty or non-HTTP URLs."""
    stripped = url.strip()
    if not stripped:
        raise ValidationError("URL must not be empty.")
    if not stripped.startswith(("http://", "https://")):
        raise ValidationError(
            f"Invalid URL: {stripped}",
            hint="URL must start with http:// or https://",
        )


def validate_block_height(height: int) -> None:
    if height <= 0:
        raise ValidationError(f"Block height must be positive, got {height}.")


# ---------------------------------------------------------------------------
# Context mappings
# ---------------------------------------------------------------------------

def _global_context(settings: Settings, scope: Scope) -> GlobalContext:
    return GlobalContext(settings=settings, offline=scope.offline, quiet=scope.quiet)


def _account_context(previous: GlobalContext, scope: Scope) -> AccountContext:
    return AccountContext(global_context=previous, account_id=scope.account_id)


def _network_selection(previous: AccountContext, scope: Scope) -> NetworkSelection:
    return NetworkSelection(account=previous, network=scope.variant)


def _preset_network(previous: NetworkSelection, _scope: Scope) -> NetworkContext:
    return NetworkContext(
        account=previous.account,
        network=previous.network,
        rpc_url=PRESET_RPC_URLS[previous.network],
    )


def _custom_network(previous: NetworkSelection, scope: Scope) -> NetworkContext:
    return NetworkContext(account=previous.account, network=previous.network, rpc_url=scope.url)


def _latest_block(previous: NetworkContext, _scope: Scope) -> ViewRequest:
    return ViewRequest(network=previous, block_height=None)


def _block_at_height(previous: NetworkContext, scope: Scope) -> ViewRequest:
    return ViewRequest(network=previous, block_height=scope.height)


def _account_defaults(context: GlobalContext) -> dict[str, Any]:
    return {"account_id": context.settings.default_account}


def _default_network(context: AccountContext) -> str | None:
    return context.global_context.settings.default_network


# ---------------------------------------------------------------------------
# Leaf actions
# ---------------------------------------------------------------------------

def _render(title: str, rows: list[tuple[str, str]]) -> None:
    """Print *rows* as a two-column Rich table, or plain text without Rich."""
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        print(title, file=sys.stderr)
        for label, value in rows:
            print(f"  {label:<16} {value}", file=sys.stderr)
        return

    table = Table(title=title, show_header=False, border_style="dim")
    table.add_column("Key", style="bold cyan", min_width=16)
    table.add_column("Value")
    for label, value in rows:
        table.add_row(label, value)
    console.print(table)


def view_account_summary(request: ViewRequest) -> int:
    """Leaf action: show which account summary would be fetched and where."""
    global_context = request.network.account.global_context
    if global_context.offline:
        raise LeafActionError(
            "Cannot view an account summary in offline mode.",
            hint="Drop --offline to allow network access.",
        )
    if not global_context.quiet:
        block = "final" if request.block_height is None else str(request.block_height)
        _render(
            "Account summary request",
            [
                ("Account", request.network.account.account_id),
                ("Network", request.network.network),
                ("RPC endpoint", request.network.rpc_url),
                ("Block", block),
            ],
        )
    return exit_codes.SUCCESS


def show_settings(context: GlobalContext) -> int:
    """Leaf action: show the effective settings."""
    settings = context.settings
    _render(
        "Settings",
        [
            ("interactive", settings.interactive),
            ("log_level", settings.log_level),
            ("show_command", str(settings.show_command)),
            ("default_network", settings.default_network or "-"),
            ("default_account", settings.default_account or "-"),
            ("offline", str(context.offline)),
        ],
    )
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Tree
# ---------------------------------------------------------------------------

def build_demo_tree() -> CommandTree:
    """Assemble the sample tree; root context is :class:`Settings`."""
    block_reference = ChoiceNode(
        "block-reference",
        message="Which block should be used?",
        variants=(
            Variant("now", "View properties in the final block", "view-now"),
            Variant("at-block-height", "View properties in a height-selected block", "view-at-height"),
        ),
        input_context=NetworkContext,
    )
    return CommandTree(
        "cmd",
        [
            SequenceNode(
                "cmd",
                fields=(
                    Field("offline", kind=FieldKind.FLAG, help="Offline mode"),
                    Field("quiet", kind=FieldKind.FLAG, help="Quiet mode"),
                ),
                child=Subcommand("top-level"),
                input_context=Settings,
                output_context=GlobalContext,
                context=_global_context,
            ),
            ChoiceNode(
                "top-level",
                message="What are you up to?",
                variants=(
                    Variant("account", "Manage accounts", "account-actions"),
                    Variant("config", "Manage connections in a configuration file", "config-actions"),
                ),
                input_context=GlobalContext,
            ),
            ChoiceNode(
                "account-actions",
                message="What do you want to do with an account?",
                variants=(
                    Variant("view-account-summary", "View properties for an account", "view-account-summary"),
                ),
                input_context=GlobalContext,
            ),
            SequenceNode(
                "view-account-summary",
                fields=(
                    Field(
                        "account_id",
                        message="What Account ID do you need to view?",
                        parse=parse_account_id,
                        help="Account to view",
                    ),
                ),
                child=NamedArg("network-config", "network", help="Select the network"),
                input_context=GlobalContext,
                output_context=AccountContext,
                context=_account_context,
                defaults=_account_defaults,
            ),
            ChoiceNode(
                "network",
                message="What is the name of the network?",
                variants=(
                    Variant("testnet", PRESET_RPC_URLS["testnet"], "preset-network"),
                    Variant("mainnet", PRESET_RPC_URLS["mainnet"], "preset-network"),
                    Variant("custom", "Provide a custom RPC endpoint", "custom-network"),
                ),
                input_context=AccountContext,
                output_context=NetworkSelection,
                context=_network_selection,
                default=_default_network,
            ),
            SequenceNode(
                "preset-network",
                child=Subcommand("block-reference"),
                input_context=NetworkSelection,
                output_context=NetworkContext,
                context=_preset_network,
            ),
            SequenceNode(
                "custom-network",
                fields=(
                    Field(
                        "url",
                        message="What is the RPC endpoint?",
                        validate=validate_rpc_url,
                        help="RPC endpoint URL",
                    ),
                ),
                child=Subcommand("block-reference"),
                input_context=NetworkSelection,
                output_context=NetworkContext,
                context=_custom_network,
            ),
            block_reference,
            SequenceNode(
                "view-now",
                action=view_account_summary,
                input_context=NetworkContext,
                output_context=ViewRequest,
                context=_latest_block,
            ),
            SequenceNode(
                "view-at-height",
                fields=(
                    Field(
                        "height",
                        message="Type the block ID height for this account:",
                        parse=int,
                        validate=validate_block_height,
                        help="Block height",
                    ),
                ),
                action=view_account_summary,
                input_context=NetworkContext,
                output_context=ViewRequest,
                context=_block_at_height,
            ),
            ChoiceNode(
                "config-actions",
                message="What do you want to do with the configuration?",
                variants=(
                    Variant("show-settings", "Show the effective settings", "show-settings"),
                ),
                input_context=GlobalContext,
            ),
            SequenceNode(
                "show-settings",
                action=show_settings,
                input_context=GlobalContext,
            ),
        ],
        root_context=Settings,
    )
