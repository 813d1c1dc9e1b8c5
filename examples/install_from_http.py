"""
Example: Install paks from an HTTP repository into a local directory.

Usage:
    export PAKMAN_REMOTE=https://example.com/paks
    python examples/install_from_http.py widget gadget@1.2.0
"""

import asyncio
import os
import sys
from pathlib import Path

from pakman import InstallSpec, Manager
from pakman.repositories import CachingSource, FSRepository, HTTPRepository


async def main(ids: list[str]):
    local = FSRepository(Path("./paks"))

    async with HTTPRepository(os.environ["PAKMAN_REMOTE"]) as http:
        # reuse one index snapshot for the whole run
        manager = Manager(local=local, remote=CachingSource(http, ttl=300))

        await manager.install(*(InstallSpec.parse(i) for i in ids))

        for manifest in await manager.list_installed():
            print(f"{manifest.id} {manifest.version} ({len(manifest.files)} files)")

        for pak in await manager.upgradable():
            print(f"{pak.id}: {pak.current_version} -> {pak.latest_version}")

    print(f"\n✅ Paks installed to: {local.base_dir.absolute()}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:]))
