import asyncio
import os
from pathlib import Path

from logship.api.run_logs import run_logs
from logship.core.config import ProcessorConfig
from logship.storage.shards import ParquetShardHandler, ShardsDir

EXAMPLES_ROOT = Path(__file__).parent
assert EXAMPLES_ROOT.name == "examples"
OUT_ROOT = EXAMPLES_ROOT.parent / "data_examples"

config = ProcessorConfig(
    domain=os.environ["LOGSHIP_DOMAIN"],
    client_id=os.environ["LOGSHIP_CLIENT_ID"],
    client_secret=os.environ["LOGSHIP_CLIENT_SECRET"],
    batch_size=500,
    max_run_time_seconds=60,
    log_level=3,  # errors and critical events only
)


async def ship_logs():
    handler = ParquetShardHandler(ShardsDir(OUT_ROOT / "shards"), rows_per_shard=50_000)
    return await run_logs(
        config=config,
        handler=handler,
        checkpoint_path=OUT_ROOT / "checkpoint.json",
    )


if __name__ == "__main__":
    result = asyncio.run(ship_logs())
    print(f"{result.status.logs_processed} logs shipped, checkpoint {result.checkpoint}")
    if result.status.warning:
        print(result.status.warning)
