"""Action alias matching and dispatch.

This module provides:
- AliasDefinition, CompiledMatcher, RegistrySnapshot: alias data models
- compile_format: format string to regex matcher
- CommandRegistry: atomic snapshot registry
- RegistryRefresher: periodic reload from StackStorm
- Resolver: chat text to alias match
- Dispatcher: submit executions and report back to chat
- InboundNotifier: result webhook payloads to chat messages
- St2Client: StackStorm API client
"""

from src.core.aliases.client import St2Client
from src.core.aliases.compiler import compile_format
from src.core.aliases.dispatcher import Dispatcher
from src.core.aliases.errors import (
    AliasDefinitionError,
    AuthenticationError,
    ChatOpsError,
    PatternCompileError,
    RemoteServiceError,
    WebhookPayloadError,
)
from src.core.aliases.models import (
    AliasDefinition,
    ChatMessage,
    CompiledMatcher,
    DispatchResult,
    ExecutionRequest,
    RegistrySnapshot,
    ResolvedMatch,
)
from src.core.aliases.notifier import InboundNotifier
from src.core.aliases.refresher import RegistryRefresher
from src.core.aliases.registry import CommandRegistry, build_snapshot
from src.core.aliases.resolver import Resolver

__all__ = [
    "AliasDefinition",
    "AliasDefinitionError",
    "AuthenticationError",
    "ChatMessage",
    "ChatOpsError",
    "CommandRegistry",
    "CompiledMatcher",
    "DispatchResult",
    "Dispatcher",
    "ExecutionRequest",
    "InboundNotifier",
    "PatternCompileError",
    "RegistryRefresher",
    "RegistrySnapshot",
    "RemoteServiceError",
    "ResolvedMatch",
    "Resolver",
    "St2Client",
    "WebhookPayloadError",
    "build_snapshot",
    "compile_format",
]
