from .cache_entry import CacheEntry
from .adapter_setting import AdapterSetting

__all__ = ["CacheEntry", "AdapterSetting"]
