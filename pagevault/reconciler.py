"""Reconciliation of the object store against the metadata index."""

import asyncio
import sqlite3
from typing import Optional, Set

from common.constants import ORIGINAL_FILENAME_METADATA_KEY
from common.logging_config import get_logger
from common.types import ContentKind, file_extension
from pagevault import config, service_locator
from pagevault.exceptions import AdoptionSkipped, StorageError
from pagevault.extractor import extract_title_and_text
from pagevault.repositories.file_repository import FileRepository
from pagevault.repositories.user_repository import UserRepository
from pagevault.services.file_service import FileService
from pagevault.types import ReconcileReport
from pagevault.utils import generate_uuid

logger = get_logger(__name__)

MAX_ADOPTION_HOPS = 1

KEY_ROOT = "root"
KEY_OWNER_SCOPED = "owner_scoped"
KEY_UNKNOWN = "unknown"

OUTCOME_KNOWN = "known"
OUTCOME_REGISTERED = "registered"
OUTCOME_ALREADY_REGISTERED = "already_registered"
OUTCOME_SKIPPED = "skipped"
OUTCOME_FAILED = "failed"


def classify_key(key: str) -> str:
    """
    Classify an object key by shape.

    Returns:
        KEY_ROOT for keys without a separator, KEY_OWNER_SCOPED for
        "<digits>/<name>", KEY_UNKNOWN for anything else
    """
    if "/" not in key:
        return KEY_ROOT
    owner, _, name = key.partition("/")
    if owner.isdigit() and name and "/" not in name:
        return KEY_OWNER_SCOPED
    return KEY_UNKNOWN


def owner_of(key: str) -> int:
    return int(key.split("/", 1)[0])


class Reconciler:
    """
    Registers objects that exist in the bucket but have no file record.

    Root-level objects are first moved into the first admin's namespace.
    Every registration goes through FileService.register_file, the same
    path uploads use.
    """

    def __init__(self, object_store=None, file_service: Optional[FileService] = None):
        self.file_repo = FileRepository()
        self.user_repo = UserRepository()
        self.object_store = object_store or service_locator.get_object_store()
        self.file_service = file_service or FileService(object_store=self.object_store)

    async def reconcile(self) -> ReconcileReport:
        """
        Run one full sweep over the bucket.

        Per-object failures are logged and counted; the object is retried by
        the next sweep.

        Raises:
            StorageError: Listing failed; the sweep is abandoned
        """
        report = ReconcileReport()

        known_keys: Optional[Set[str]] = None
        record_count = await asyncio.to_thread(self.file_repo.count_files)
        if record_count > config.RECONCILE_KEYSET_LIMIT:
            report.lookup_mode = "point"
        else:
            known_keys = await asyncio.to_thread(self.file_repo.get_all_object_keys)
        logger.info(f"Reconciliation started: {record_count} records, lookup_mode={report.lookup_mode}")

        cursor = None
        while True:
            page = await asyncio.to_thread(
                self.object_store.list_objects, cursor, config.RECONCILE_PAGE_SIZE
            )

            for listed in page.objects:
                report.listed += 1
                if await self._is_known(listed.key, known_keys):
                    report.known += 1
                    continue

                outcome = await self._ingest(listed.key, listed.size, report)
                if outcome == OUTCOME_REGISTERED:
                    report.registered += 1
                elif outcome == OUTCOME_ALREADY_REGISTERED:
                    report.already_registered += 1
                elif outcome == OUTCOME_SKIPPED:
                    report.skipped += 1
                elif outcome == OUTCOME_FAILED:
                    report.failed += 1

            if not page.truncated or not page.next_cursor:
                break
            cursor = page.next_cursor

        logger.info(f"Reconciliation complete: {report.to_dict()}")
        return report

    async def reconcile_key(self, key: str) -> str:
        """
        Run the classify, adopt and register path for a single object.

        Returns:
            One of the OUTCOME_* values
        """
        if await asyncio.to_thread(self.file_repo.exists_by_object_key, key):
            return OUTCOME_KNOWN

        stored = await asyncio.to_thread(self.object_store.head, key)
        if stored is None:
            logger.warning(f"Object from event not found, skipping [object_key={key}]")
            return OUTCOME_SKIPPED

        return await self._ingest(key, stored.size, ReconcileReport())

    async def _is_known(self, key: str, known_keys: Optional[Set[str]]) -> bool:
        if known_keys is not None:
            return key in known_keys
        return await asyncio.to_thread(self.file_repo.exists_by_object_key, key)

    async def _ingest(self, key: str, size: int, report: ReconcileReport) -> str:
        try:
            return await self._adopt_and_register(key, size, report)
        except AdoptionSkipped as e:
            logger.warning(f"Adoption skipped [object_key={key}]: {e}")
            return OUTCOME_SKIPPED
        except StorageError as e:
            logger.error(f"Storage error while reconciling [object_key={key}]: {e}")
            return OUTCOME_FAILED
        except Exception as e:
            logger.error(f"Failed to reconcile object [object_key={key}]: {e}", exc_info=True)
            return OUTCOME_FAILED

    async def _adopt_and_register(self, key: str, size: int, report: ReconcileReport) -> str:
        hops = 0
        while True:
            shape = classify_key(key)
            if shape == KEY_OWNER_SCOPED:
                break
            if shape == KEY_ROOT and hops < MAX_ADOPTION_HOPS:
                new_key = await self._adopt(key)
                if new_key is None:
                    return OUTCOME_SKIPPED
                key = new_key
                report.adopted += 1
                hops += 1
                continue
            logger.warning(f"Unknown object key structure, skipping [object_key={key}] [shape={shape}]")
            return OUTCOME_SKIPPED

        owner_id = owner_of(key)
        if not await asyncio.to_thread(self.user_repo.exists, owner_id):
            logger.warning(f"Object belongs to unknown owner, skipping [object_key={key}] [owner_id={owner_id}]")
            return OUTCOME_SKIPPED

        stored = await asyncio.to_thread(self.object_store.get_range, key, config.RECONCILE_READ_BYTES)
        if stored is None:
            logger.warning(f"Object disappeared before read, skipping [object_key={key}]")
            return OUTCOME_SKIPPED

        filename = stored.custom_metadata.get(ORIGINAL_FILENAME_METADATA_KEY) or key.rsplit("/", 1)[-1]
        kind = ContentKind.from_filename(filename)
        extraction = extract_title_and_text(stored.data, kind, filename)

        if await asyncio.to_thread(self.file_repo.exists_by_object_key, key):
            return OUTCOME_ALREADY_REGISTERED

        try:
            file = await self.file_service.register_file(
                owner_id=owner_id,
                object_key=key,
                filename=filename,
                display_name=extraction.title or filename,
                kind=kind,
                size=size,
                text=extraction.text,
            )
        except sqlite3.IntegrityError:
            logger.info(f"Object registered concurrently [object_key={key}]")
            return OUTCOME_ALREADY_REGISTERED

        logger.info(f"Registered object [object_key={key}] [file_id={file.file_id}] [owner_id={owner_id}]")
        return OUTCOME_REGISTERED

    async def _adopt(self, key: str) -> Optional[str]:
        """
        Move a root-level object into the first admin's namespace.

        Returns:
            The new owner-scoped key, or None if the object is gone
        """
        admin = await asyncio.to_thread(self.user_repo.get_first_admin)
        if admin is None:
            raise AdoptionSkipped("No admin user exists to adopt root-level objects")

        stored = await asyncio.to_thread(self.object_store.head, key)
        if stored is None:
            logger.warning(f"Object disappeared before adoption [object_key={key}]")
            return None

        metadata = dict(stored.custom_metadata)
        metadata.setdefault(ORIGINAL_FILENAME_METADATA_KEY, key)
        content_type = stored.content_type or ContentKind.from_filename(key).content_type

        new_key = f"{admin.user_id}/{generate_uuid()}.{file_extension(key, default='html')}"
        await asyncio.to_thread(self.object_store.copy, key, new_key, metadata, content_type)
        try:
            await asyncio.to_thread(self.object_store.delete, key)
        except StorageError:
            # undo the copy; the root key is adopted again next sweep
            try:
                await asyncio.to_thread(self.object_store.delete, new_key)
            except StorageError as e:
                logger.error(f"Failed to remove adoption copy [object_key={key}] [new_key={new_key}]: {e}")
            raise

        logger.info(f"Adopted root object [object_key={key}] [new_key={new_key}] [owner_id={admin.user_id}]")
        return new_key
