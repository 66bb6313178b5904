"""nebula.ledger: positions, transaction plans and the Fee Engine."""

from nebula.ledger.fees import FeeSplit as FeeSplit
from nebula.ledger.fees import Payout as Payout
from nebula.ledger.fees import decode_fee_rate as decode_fee_rate
from nebula.ledger.fees import encode_fee_rate as encode_fee_rate
from nebula.ledger.fees import split as split
from nebula.ledger.plan import EMPTY_PLAN as EMPTY_PLAN
from nebula.ledger.plan import AttachedScript as AttachedScript
from nebula.ledger.plan import ScriptKind as ScriptKind
from nebula.ledger.plan import SpendInput as SpendInput
from nebula.ledger.plan import TxOutput as TxOutput
from nebula.ledger.plan import TxPlan as TxPlan
from nebula.ledger.plan import compose_all as compose_all
from nebula.ledger.utxo import Utxo as Utxo
