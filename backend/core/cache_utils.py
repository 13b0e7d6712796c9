"""
Caching utilities for hot read paths (trip listings, unread counters).

Keys are namespaced by a version counter stored in the cache itself.
Bumping the counter invalidates every key of the namespace at once, which
works the same on Redis and on the local-memory cache used in development.
"""
from django.core.cache import cache
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
TRIPS_LIST_CACHE_TTL = 120  # 2 minutes
UNREAD_COUNT_CACHE_TTL = 60  # 1 minute
VERSION_TTL = None  # never expires

TRIPS_LIST_NAMESPACE = 'trips_list'
UNREAD_NAMESPACE = 'unread'


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def _version_key(namespace):
    return f"cache_version:{namespace}"


def get_namespace_version(namespace):
    version = cache.get(_version_key(namespace))
    if version is None:
        version = 1
        cache.add(_version_key(namespace), version, VERSION_TTL)
    return version


def bump_namespace_version(namespace):
    """Invalidate every key built for the namespace"""
    try:
        cache.incr(_version_key(namespace))
    except ValueError:
        # Key missing: nothing was cached under the old version
        cache.set(_version_key(namespace), 2, VERSION_TTL)
    logger.info(f"Invalidated cache namespace: {namespace}")


def versioned_key(namespace, *args, **kwargs):
    version = get_namespace_version(namespace)
    return make_cache_key(f"{namespace}:v{version}", *args, **kwargs)


def get_cached_trips_list(filters_dict):
    """
    Get cached trips list for the given filters
    Returns tuple: (cached_data, cache_key)
    """
    cache_key = versioned_key(TRIPS_LIST_NAMESPACE, **filters_dict)
    return cache.get(cache_key), cache_key


def cache_trips_list(cache_key, data, ttl=TRIPS_LIST_CACHE_TTL):
    cache.set(cache_key, data, ttl)
    logger.debug(f"Cached trips list: {cache_key}")


def invalidate_trips_cache():
    bump_namespace_version(TRIPS_LIST_NAMESPACE)


def unread_namespace(user_id):
    return f"{UNREAD_NAMESPACE}:{user_id}"


def get_cached_unread(user_id, kind):
    """
    Cached unread figures for a user; kind is 'count' or 'by_tab'.
    Returns tuple: (cached_data, cache_key)
    """
    cache_key = versioned_key(unread_namespace(user_id), kind)
    return cache.get(cache_key), cache_key


def cache_unread(cache_key, data, ttl=UNREAD_COUNT_CACHE_TTL):
    cache.set(cache_key, data, ttl)


def invalidate_unread_cache(*user_ids):
    for user_id in user_ids:
        if user_id is not None:
            bump_namespace_version(unread_namespace(user_id))
