from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from catalog.product_service import ProductCatalogService
from registration.demo_data import DemoSubmissionStore
from registration.lifecycle import SubmissionLifecycle
from registration.settings_resolver import SettingsResolver
from registration.uploads import UploadService
from repos.product_repo import ProductRepository
from repos.settings_repo import SettingsRepository
from repos.submission_repo import SubmissionRepository
from storage.gateway import FirestoreGateway
from storage.local_cache import LocalCache


@lru_cache(maxsize=1)
def get_gateway() -> FirestoreGateway:
    return FirestoreGateway()


@lru_cache(maxsize=1)
def get_cache() -> LocalCache:
    return LocalCache()


@lru_cache(maxsize=1)
def get_demo_store() -> DemoSubmissionStore:
    # One demo set per process; edits to it last until restart.
    return DemoSubmissionStore()


def get_settings_resolver(
    gateway: FirestoreGateway = Depends(get_gateway), cache: LocalCache = Depends(get_cache)
) -> SettingsResolver:
    return SettingsResolver(repo=SettingsRepository(gateway), cache=cache)


def get_lifecycle(
    gateway: FirestoreGateway = Depends(get_gateway),
    cache: LocalCache = Depends(get_cache),
    demo: DemoSubmissionStore = Depends(get_demo_store),
) -> SubmissionLifecycle:
    return SubmissionLifecycle(repo=SubmissionRepository(gateway), cache=cache, demo=demo)


def get_catalog(gateway: FirestoreGateway = Depends(get_gateway)) -> ProductCatalogService:
    return ProductCatalogService(repo=ProductRepository(gateway))


def get_uploads(gateway: FirestoreGateway = Depends(get_gateway)) -> UploadService:
    return UploadService(gateway=gateway)
