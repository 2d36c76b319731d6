import asyncio
from typing import Optional
from ..utils.logger import log
from ..services.price_cache import PriceHistoryCache
from ..config.settings import settings


async def cache_sweep_loop(cache: PriceHistoryCache, interval: Optional[float] = None):
    """
    Drop expired price histories every ``interval`` seconds.
    Reads already treat expired entries as misses; this only bounds memory.
    """
    if interval is None:
        interval = settings.CACHE_CHECK_PERIOD
    while True:
        await asyncio.sleep(interval)
        removed = cache.sweep()
        if removed:
            log.info(f"🧹 Removed {removed} expired cache entries")


async def task_wrapper(coro, name: str, *args):
    while True:
        try:
            log.info(f"🔥 Starting: {name}")
            await coro(*args)
        except asyncio.CancelledError:
            log.warning(f"⚠️ {name} cancelled.")
            break
        except Exception as e:
            log.error(f"❌ {name} crashed: {e}")
            await asyncio.sleep(5)
            log.info(f"🔄 Restarting {name}...")


def start_background_tasks(cache: PriceHistoryCache) -> list[asyncio.Task]:
    log.info("🚀 Starting background task manager...")
    return [
        asyncio.create_task(task_wrapper(cache_sweep_loop, "Cache Sweeper", cache)),
    ]
