# scripts/smoke.py
"""
Smoke Test Script for the plan editor.

Runs one editing session end to end on real timers: add a step, undo, redo,
let the autosave debounce fire, and reload the stored plan.

Usage
-----
1. In-memory store (nothing touches disk):
    $ python scripts/smoke.py

2. The configured store (PLANDRAFT_STORE_BACKEND / PLANDRAFT_STORE_DIR):
    $ python scripts/smoke.py --configured --plan smoke-demo
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from plandraft.core.settings import load_settings
from plandraft.core.store.base import SnapshotStore
from plandraft.core.store.factory import open_store
from plandraft.core.store.memory import InMemorySnapshotStore
from plandraft.editor import PlanEditor, find_template, starter_snapshot
from plandraft.editor.summary import budget_label, relative_saved_label

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)


async def run_session(store: SnapshotStore, plan_id: str, debounce_seconds: float) -> bool:
    """Drive one session and report whether the store ends up with the edit."""
    editor = PlanEditor(
        starter_snapshot(plan_id, empty=True), store, debounce_seconds=debounce_seconds
    )
    await editor.open()
    try:
        template = find_template("collaborative-activity")
        assert template is not None
        step = editor.add_step_from_template(template)
        print(f"➕ Added step {step.id} ({step.title})")

        editor.reorder_steps(0, 0)
        print(f"   steps={len(editor.steps)} can_undo={editor.can_undo}")

        editor.undo()
        print(f"↩️  Undo -> steps={len(editor.steps)} can_redo={editor.can_redo}")
        editor.redo()
        print(f"↪️  Redo -> steps={len(editor.steps)}")

        print(f"⏳ Waiting for the {debounce_seconds:.2f}s debounce...")
        await editor.autosave.wait_idle()
        print(f"💾 Saved: {relative_saved_label(editor.last_saved_at)}")
    finally:
        await editor.close()

    stored = await store.load(plan_id)
    if stored is None:
        print("❌ Nothing stored")
        return False

    print(f"📄 Stored plan has {len(stored.steps)} step(s); {budget_label(editor.totals)}")
    return [s.id for s in stored.steps] == [step.id]


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run plan editor smoke test")
    parser.add_argument("--plan", "-p", default="smoke-plan", help="Plan id to write")
    parser.add_argument(
        "--configured",
        action="store_true",
        help="Use the store named by settings instead of an in-memory one",
    )
    parser.add_argument("--debounce", type=float, default=0.2, help="Debounce window in seconds")
    args = parser.parse_args()

    store: SnapshotStore
    if args.configured:
        config = load_settings()
        print(f"\n📂 Using {config.store_backend} store")
        store = open_store(config)
    else:
        print("\n📝 Using in-memory store")
        store = InMemorySnapshotStore()

    try:
        passed = asyncio.run(run_session(store, args.plan, args.debounce))
    except Exception as exc:
        print(f"\n❌ Session crashed: {exc}")
        raise SystemExit(1) from exc

    print("\n" + "=" * 60)
    print("✅ Smoke test passed" if passed else "❌ Smoke test failed")
    print("=" * 60)
    if not passed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
