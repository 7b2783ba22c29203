# MIT License
# Copyright (c) 2025 Hashborn

import argparse
import json
import logging
import sys
from ..core.assets import InMemoryAssetBank
from ..core.pool import RewardPool
from ..core.settlement import settlement_engine
from ..core.state import LedgerState
from ..protocol.config.params import get_config
from ..protocol.types.common import LedgerError
from ..storage.db import StorageDB

logger = logging.getLogger(__name__)

def load_scenario(path: str) -> dict:
    with open(path, "r") as f:
        scenario = json.load(f)
    if "reference_asset" not in scenario:
        raise ValueError("scenario must define 'reference_asset'")
    return scenario

def apply_op(pool: RewardPool, op: dict):
    kind = op.get("op")
    account = op.get("account")
    if kind == "stake":
        return pool.stake(account, op["amount"])
    elif kind == "unstake":
        return pool.unstake(account, op["amount"])
    elif kind == "distribute":
        return pool.distribute(account, op["asset"], op["amount"])
    elif kind == "claim":
        indices = op.get("indices", [])
        if not isinstance(indices, list):
            raise ValueError(f"claim indices must be a list, got {type(indices).__name__}")
        return pool.claim_rewards(account, indices)
    raise ValueError(f"Unknown op '{kind}'")

def print_state(state: LedgerState):
    print(f"Reference asset: {state.reference_asset}   policy: {state.claims.policy.value}")
    print(f"Total staked:    {state.ledger.total_staked}")
    print()
    print(f"{'Account':<20} {'Stake':>12} {'Cursor':>8}")
    print("-" * 42)
    for record in sorted(state.ledger.records(), key=lambda r: r.account):
        cursor = state.claims.get(record.account)
        print(f"{record.account:<20} {record.amount:>12} {cursor.next_index if cursor else '-':>8}")
    print()
    print(f"{'Index':<6} {'Asset':<12} {'Amount':>12} {'Total stake':>12}")
    print("-" * 45)
    for event in state.registry.events():
        print(f"{event.index:<6} {event.reward_asset:<12} {event.total_amount:>12} {state.ledger.total_at(event.index):>12}")

    pending = []
    for record in sorted(state.ledger.records(), key=lambda r: r.account):
        for result in settlement_engine.preview(state, record.account):
            pending.append(result)
    if pending:
        print()
        print("Claimable:")
        for result in pending:
            print(f"  {result.account:<20} #{result.index:<5} {result.amount:>12} {result.reward_asset}")

# --- Commands ---
def cmd_run(args):
    try:
        scenario = load_scenario(args.scenario)
    except (OSError, ValueError) as e:
        print(f"Error: cannot read scenario: {e}")
        sys.exit(1)

    bank = InMemoryAssetBank()
    for asset, holders in scenario.get("alloc", {}).items():
        for account, amount in holders.items():
            bank.mint(asset, account, int(amount))

    db = StorageDB(args.db) if args.db else None
    try:
        pool = RewardPool(scenario["reference_asset"], bank, config=get_config(args.preset), db=db)
    except ValueError as e:
        if db is not None:
            db.close()
        print(f"Error: {e}")
        sys.exit(1)

    failures = 0
    for i, op in enumerate(scenario.get("ops", [])):
        try:
            result = apply_op(pool, op)
        except (LedgerError, ValueError, KeyError) as e:
            failures += 1
            print(f"[{i}] {op.get('op')} {op.get('account', '')}: FAILED ({type(e).__name__}: {e})")
            continue

        if op.get("op") == "claim":
            paid = ", ".join(f"#{r.index}={r.amount} {r.reward_asset}" for r in result) or "nothing"
            print(f"[{i}] claim {op.get('account')}: {paid}")
        elif op.get("op") == "distribute":
            print(f"[{i}] distribute {op.get('account')}: #{result.index} {result.total_amount} {result.reward_asset}")
        else:
            print(f"[{i}] {op.get('op')} {op.get('account')}: stake now {result}")

    print()
    print_state(pool.state)
    print()
    print("Balances:")
    for asset in sorted(bank.balances):
        for account, amount in sorted(bank.balances[asset].items()):
            if amount:
                print(f"  {asset:<12} {account:<42} {amount:>12}")

    if db is not None:
        db.close()
    if failures:
        print(f"\n{failures} operation(s) failed")

def cmd_show(args):
    db = StorageDB(args.db)
    try:
        state = LedgerState.load(db)
    finally:
        db.close()
    if state is None:
        print(f"Error: no pool state in {args.db}")
        sys.exit(1)
    print_state(state)

def main(argv=None):
    parser = argparse.ArgumentParser(prog="rewardpool", description="Reward Pool ledger CLI")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")

    subparsers = parser.add_subparsers(dest="command", help="Sub-commands")

    p_run = subparsers.add_parser("run", help="Execute a scenario file against a fresh asset bank")
    p_run.add_argument("scenario", help="Scenario JSON file")
    p_run.add_argument("--db", help="SQLite file to load/persist ledger state")
    p_run.add_argument("--preset", help="Pool config preset (default: $REWARDPOOL_PRESET or 'default')")

    p_show = subparsers.add_parser("show", help="Print persisted ledger state")
    p_show.add_argument("--db", required=True, help="SQLite file written by 'run --db'")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "run": cmd_run(args)
    elif args.command == "show": cmd_show(args)
    else:
        parser.print_help()

if __name__ == "__main__":
    main()
