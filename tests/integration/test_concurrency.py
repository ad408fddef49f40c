"""
Concurrent access to one config directory.

Each writer adds a distinct context; a lost update would show up as a
missing name at the end.
"""

from __future__ import annotations

import os
import subprocess
import sys
import threading
from pathlib import Path

from ctxstore.settings import CONFIG_DIR_ENV, StoreSettings
from ctxstore.types import ContextType


class TestThreads:
    """Many threads, one store per thread."""

    def test_no_lost_updates(self, settings: StoreSettings, make_k8s_context):
        errors: list[BaseException] = []

        def worker(index: int) -> None:
            try:
                store = settings.connect()
                for j in range(5):
                    store.add_context(make_k8s_context(f"t{index}-{j}"), make_current=True)
            except BaseException as e:  # noqa: BLE001
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=60)

        assert errors == []
        store = settings.connect()
        names = {c.name for c in store.list_contexts()}
        assert names == {f"t{i}-{j}" for i in range(8) for j in range(5)}
        # Whichever add ran last is both the current context and the server
        current = store.get_current_context(ContextType.K8S).name
        assert store.get_current_server().name == current


class TestProcesses:
    """Separate CLI invocations against one directory."""

    def test_parallel_cli_adds(self, tmp_path: Path):
        config_dir = tmp_path / "shared"
        env = dict(os.environ, **{CONFIG_DIR_ENV: str(config_dir)})

        procs = [
            subprocess.Popen(
                [
                    sys.executable, "-m", "ctxstore.cli",
                    "context", "add", f"p{i}",
                    "--type", "k8s" if i % 2 else "tmc",
                    "--endpoint", f"https://p{i}",
                    "--current",
                ],
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
            for i in range(10)
        ]
        for proc in procs:
            _, stderr = proc.communicate(timeout=120)
            assert proc.returncode == 0, stderr.decode()

        store = StoreSettings(config_dir=str(config_dir)).connect()
        assert {c.name for c in store.list_contexts()} == {f"p{i}" for i in range(10)}
        assert store.get_current_server().name in {f"p{i}" for i in range(1, 10, 2)}
        assert store.get_current_context(ContextType.TMC).name in {
            f"p{i}" for i in range(0, 10, 2)
        }
