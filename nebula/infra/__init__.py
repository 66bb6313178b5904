"""nebula.infra: collaborator protocols, in-memory adapters and configuration."""

from nebula.infra.config import DEFAULT_MIN_ADA as DEFAULT_MIN_ADA
from nebula.infra.config import PROTOCOL_FUND_ADDRESS as PROTOCOL_FUND_ADDRESS
from nebula.infra.config import VALIDITY_SLOT as VALIDITY_SLOT
from nebula.infra.config import ContractConfig as ContractConfig
from nebula.infra.config import Network as Network
from nebula.infra.config import SlotConfig as SlotConfig
from nebula.infra.config import fund_protocol_active as fund_protocol_active
from nebula.infra.memory_adapter import InMemoryLedger as InMemoryLedger
from nebula.infra.memory_adapter import InMemoryScriptCompiler as InMemoryScriptCompiler
from nebula.infra.memory_adapter import InMemorySubmitter as InMemorySubmitter
from nebula.infra.memory_adapter import InMemoryWallet as InMemoryWallet
from nebula.infra.protocols import CompiledScript as CompiledScript
from nebula.infra.protocols import LedgerQuery as LedgerQuery
from nebula.infra.protocols import ScriptCompiler as ScriptCompiler
from nebula.infra.protocols import TxSubmitter as TxSubmitter
from nebula.infra.protocols import Wallet as Wallet
