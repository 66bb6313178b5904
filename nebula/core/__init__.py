"""nebula.core: public API for all core types."""

from nebula.core.errors import (
    ConstraintUnsatisfiedError as ConstraintUnsatisfiedError,
)
from nebula.core.errors import (
    DecodeError as DecodeError,
)
from nebula.core.errors import (
    FieldViolation as FieldViolation,
)
from nebula.core.errors import (
    IllegalTransitionError as IllegalTransitionError,
)
from nebula.core.errors import (
    InsufficientFundsError as InsufficientFundsError,
)
from nebula.core.errors import (
    LedgerQueryError as LedgerQueryError,
)
from nebula.core.errors import (
    NebulaError as NebulaError,
)
from nebula.core.errors import (
    NoMatchingUtxoError as NoMatchingUtxoError,
)
from nebula.core.errors import (
    NotOwnerError as NotOwnerError,
)
from nebula.core.errors import (
    ReferenceNotFoundError as ReferenceNotFoundError,
)
from nebula.core.errors import (
    ScriptsNotDeployedError as ScriptsNotDeployedError,
)
from nebula.core.errors import (
    SubmissionError as SubmissionError,
)
from nebula.core.errors import (
    ValidationError as ValidationError,
)
from nebula.core.errors import (
    WrongVariantError as WrongVariantError,
)
from nebula.core.identifiers import (
    AssetName as AssetName,
)
from nebula.core.identifiers import (
    LOVELACE as LOVELACE,
)
from nebula.core.identifiers import (
    OutRef as OutRef,
)
from nebula.core.identifiers import (
    PolicyId as PolicyId,
)
from nebula.core.identifiers import (
    TxHash as TxHash,
)
from nebula.core.identifiers import (
    UnitParts as UnitParts,
)
from nebula.core.identifiers import (
    from_label as from_label,
)
from nebula.core.identifiers import (
    from_text as from_text,
)
from nebula.core.identifiers import (
    from_unit as from_unit,
)
from nebula.core.identifiers import (
    to_label as to_label,
)
from nebula.core.identifiers import (
    to_text as to_text,
)
from nebula.core.identifiers import (
    to_unit as to_unit,
)
from nebula.core.result import (
    Err as Err,
)
from nebula.core.result import (
    Ok as Ok,
)
from nebula.core.result import (
    Result as Result,
)
from nebula.core.result import (
    sequence as sequence,
)
from nebula.core.result import (
    unwrap as unwrap,
)
from nebula.core.types import (
    FrozenMap as FrozenMap,
)
from nebula.core.types import (
    UtcDatetime as UtcDatetime,
)
from nebula.core.value import (
    Assets as Assets,
)
from nebula.core.value import (
    EMPTY_ASSETS as EMPTY_ASSETS,
)
from nebula.core.value import (
    add_assets as add_assets,
)
from nebula.core.value import (
    lovelace_of as lovelace_of,
)
from nebula.core.value import (
    make_assets as make_assets,
)
from nebula.core.value import (
    with_lovelace as with_lovelace,
)
