"""vaultform - Declarative Vault resources mapped onto the Vault HTTP API."""

from .client import ClientConfig as ClientConfig
from .client import RemoteClient as RemoteClient
from .client import VaultClient as VaultClient
from .context import Context as Context
from .errors import Diagnostic as Diagnostic
from .errors import ResourceError as ResourceError
from .lifecycle import LifecycleDriver as LifecycleDriver
from .lifecycle import Outcome as Outcome
from .ops import Absent as Absent
from .ops import Ensure as Ensure
from .ops import Present as Present
from .ops import ResourceOp as ResourceOp
from .record import Record as Record
from .record import ResourceState as ResourceState
from .resources import Registry as Registry
from .resources import Resource as Resource
from .resources import build_registry as build_registry
from .state import StateFile as StateFile
from .workspace import Workspace as Workspace
