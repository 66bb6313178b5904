"""nebula.trade: trade state machine, matcher, minting policy and royalty records."""

from nebula.trade.contract import OPEN_BIDS as OPEN_BIDS
from nebula.trade.contract import SellOrder as SellOrder
from nebula.trade.contract import TradeContract as TradeContract
from nebula.trade.contract import TraitConstraint as TraitConstraint
from nebula.trade.lifecycle import PositionState as PositionState
from nebula.trade.lifecycle import Transition as Transition
from nebula.trade.lifecycle import check_transition as check_transition
from nebula.trade.marketplace import Marketplace as Marketplace
from nebula.trade.marketplace import create_royalty as create_royalty
from nebula.trade.matcher import Resolution as Resolution
from nebula.trade.matcher import resolve as resolve
from nebula.trade.minting import LockingPolicy as LockingPolicy
from nebula.trade.minting import authorize_mint as authorize_mint
from nebula.trade.royalty import RoyaltyRecord as RoyaltyRecord
from nebula.trade.royalty import RoyaltyShare as RoyaltyShare
