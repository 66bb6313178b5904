"""nebula.datum: Datum Codec: Plutus data records, addresses and CIP-68 metadata."""

from nebula.datum.address import address_to_plutus as address_to_plutus
from nebula.datum.address import plutus_to_address as plutus_to_address
from nebula.datum.address import script_address as script_address
from nebula.datum.cip68 import AssetMetadata as AssetMetadata
from nebula.datum.cip68 import decode_reference_datum as decode_reference_datum
from nebula.datum.codec import decode as decode
from nebula.datum.codec import decode_bid as decode_bid
from nebula.datum.codec import decode_listing as decode_listing
from nebula.datum.codec import decode_payment_datum as decode_payment_datum
from nebula.datum.codec import decode_royalty_info as decode_royalty_info
from nebula.datum.codec import decode_trade_action as decode_trade_action
from nebula.datum.codec import decode_trade_datum as decode_trade_datum
from nebula.datum.codec import encode as encode
from nebula.datum.plutus import Constr as Constr
from nebula.datum.plutus import from_cbor as from_cbor
from nebula.datum.plutus import to_cbor as to_cbor
from nebula.datum.types import Bid as Bid
from nebula.datum.types import Listing as Listing
from nebula.datum.types import PaymentDatum as PaymentDatum
from nebula.datum.types import PlutusAddress as PlutusAddress
from nebula.datum.types import RoyaltyInfo as RoyaltyInfo
from nebula.datum.types import RoyaltyRecipient as RoyaltyRecipient
from nebula.datum.types import SpecificSymbolWithConstraints as SpecificSymbolWithConstraints
from nebula.datum.types import SpecificValue as SpecificValue
from nebula.datum.types import TradeAction as TradeAction
from nebula.datum.types import TraitFilter as TraitFilter
