"""Tests for nebula.infra.memory_adapter: in-memory test doubles."""

from __future__ import annotations

from nebula.core.identifiers import LOVELACE, OutRef
from nebula.core.result import Err, Ok, unwrap
from nebula.core.value import EMPTY_ASSETS, make_assets
from nebula.infra.memory_adapter import (
    InMemoryLedger,
    InMemoryScriptCompiler,
    InMemorySubmitter,
    InMemoryWallet,
)
from nebula.infra.protocols import LedgerQuery, ScriptCompiler, TxSubmitter, Wallet
from nebula.ledger.plan import SpendInput, TxOutput, TxPlan

from conftest import ADA, key_address

ALICE = key_address(1)
BOB = key_address(2)
TOKEN = "ab" * 28 + "01"


class TestProtocolConformance:
    def test_adapters_satisfy_protocols(self) -> None:
        ledger = InMemoryLedger()
        assert isinstance(ledger, LedgerQuery)
        assert isinstance(InMemoryWallet(ledger, ALICE), Wallet)
        assert isinstance(InMemorySubmitter(ledger), TxSubmitter)
        assert isinstance(InMemoryScriptCompiler(), ScriptCompiler)


class TestInMemoryLedger:
    def test_fund_and_query(self) -> None:
        ledger = InMemoryLedger()
        utxo = ledger.fund(ALICE, make_assets({LOVELACE: 5, TOKEN: 1}))
        assert ledger.utxo_by_reference(utxo.out_ref) == Ok(utxo)
        assert ledger.utxo_by_unit(TOKEN) == Ok(utxo)
        assert ledger.utxos_at_address(ALICE) == Ok((utxo,))
        assert ledger.utxos_at_address_with_unit(ALICE, TOKEN) == Ok((utxo,))
        assert ledger.utxos_at_address_with_unit(BOB, TOKEN) == Ok(())

    def test_funded_positions_are_distinct(self) -> None:
        ledger = InMemoryLedger()
        a = ledger.fund(ALICE, make_assets({LOVELACE: 1}))
        b = ledger.fund(ALICE, make_assets({LOVELACE: 1}))
        assert a.out_ref != b.out_ref
        assert ledger.count() == 2

    def test_spend(self) -> None:
        ledger = InMemoryLedger()
        utxo = ledger.fund(ALICE, make_assets({LOVELACE: 1}))
        assert ledger.spend(utxo.out_ref) == Ok(utxo)
        assert ledger.utxo_by_reference(utxo.out_ref) == Ok(None)
        assert isinstance(ledger.spend(utxo.out_ref), Err)

    def test_unknown_unit(self) -> None:
        assert InMemoryLedger().utxo_by_unit(TOKEN) == Ok(None)


class TestInMemorySubmitter:
    def test_pays_from_wallet_and_returns_change(self) -> None:
        ledger = InMemoryLedger()
        ledger.fund(ALICE, make_assets({LOVELACE: 10 * ADA}))
        plan = TxPlan(outputs=(TxOutput(BOB, make_assets({LOVELACE: 3 * ADA})),))
        tx_hash = unwrap(InMemorySubmitter(ledger).submit(plan, ALICE))
        paid = unwrap(ledger.utxo_by_reference(OutRef(tx_hash, 0)))
        assert paid is not None
        assert paid.address == BOB
        assert paid.lovelace == 3 * ADA
        assert [u.lovelace for u in unwrap(ledger.utxos_at_address(ALICE))] == [7 * ADA]

    def test_tops_up_token_only_outputs(self) -> None:
        ledger = InMemoryLedger()
        ledger.fund(ALICE, make_assets({LOVELACE: 10 * ADA, TOKEN: 1}))
        plan = TxPlan(outputs=(TxOutput(BOB, make_assets({TOKEN: 1})),))
        unwrap(InMemorySubmitter(ledger, min_ada=ADA).submit(plan, ALICE))
        (received,) = unwrap(ledger.utxos_at_address(BOB))
        assert received.assets == make_assets({LOVELACE: ADA, TOKEN: 1})

    def test_empty_output_gets_min_ada(self) -> None:
        ledger = InMemoryLedger()
        ledger.fund(ALICE, make_assets({LOVELACE: 10 * ADA}))
        plan = TxPlan(outputs=(TxOutput(BOB, EMPTY_ASSETS, script_ref=b"\x01"),))
        unwrap(InMemorySubmitter(ledger).submit(plan, ALICE))
        (received,) = unwrap(ledger.utxos_at_address(BOB))
        assert received.lovelace == ADA
        assert received.script_ref == b"\x01"

    def test_insufficient_funds(self) -> None:
        ledger = InMemoryLedger()
        ledger.fund(ALICE, make_assets({LOVELACE: ADA}))
        plan = TxPlan(outputs=(TxOutput(BOB, make_assets({LOVELACE: 5 * ADA})),))
        result = InMemorySubmitter(ledger).submit(plan, ALICE)
        assert isinstance(result, Err)
        assert result.error.code == "SUBMISSION_REJECTED"
        assert ledger.count() == 1

    def test_missing_signature(self) -> None:
        ledger = InMemoryLedger()
        ledger.fund(ALICE, make_assets({LOVELACE: 10 * ADA}))
        plan = TxPlan(required_signers=frozenset({"02" * 28}))
        result = InMemorySubmitter(ledger).submit(plan, ALICE)
        assert isinstance(result, Err)
        assert "missing signatures" in result.error.reason

    def test_spent_input_rejected(self) -> None:
        ledger = InMemoryLedger()
        utxo = ledger.fund(ALICE, make_assets({LOVELACE: 10 * ADA}))
        plan = TxPlan(inputs=(SpendInput(utxo),))
        submitter = InMemorySubmitter(ledger)
        unwrap(submitter.submit(plan, ALICE))
        result = submitter.submit(plan, ALICE)
        assert isinstance(result, Err)
        assert "spent or unknown" in result.error.reason

    def test_double_spend_rejected(self) -> None:
        ledger = InMemoryLedger()
        utxo = ledger.fund(ALICE, make_assets({LOVELACE: 10 * ADA}))
        plan = TxPlan(inputs=(SpendInput(utxo), SpendInput(utxo)))
        result = InMemorySubmitter(ledger).submit(plan, ALICE)
        assert isinstance(result, Err)
        assert "consumed twice" in result.error.reason

    def test_records_submissions(self) -> None:
        ledger = InMemoryLedger()
        ledger.fund(ALICE, make_assets({LOVELACE: 10 * ADA}))
        submitter = InMemorySubmitter(ledger)
        plan = TxPlan(outputs=(TxOutput(BOB, make_assets({LOVELACE: ADA})),))
        tx_hash = unwrap(submitter.submit(plan, ALICE))
        assert submitter.submitted() == ((tx_hash, plan),)


class TestInMemoryScriptCompiler:
    def test_deterministic_and_parameter_sensitive(self) -> None:
        compiler = InMemoryScriptCompiler()
        a = compiler.trade_validator(b"\x01")
        assert a == compiler.trade_validator(b"\x01")
        assert a.hash != compiler.trade_validator(b"\x02").hash
        assert len(a.hash) == 56

    def test_one_shot_policy_per_out_ref(self) -> None:
        compiler = InMemoryScriptCompiler()
        a = compiler.one_shot_policy(OutRef("00" * 32, 0))
        b = compiler.one_shot_policy(OutRef("00" * 32, 1))
        assert a.hash != b.hash
