"""File ingestion into provider-managed file search stores.

Uploads a file into a store, then polls the resulting indexing operation until
it reports completion or the attempt ceiling is reached. Polling waits on a
cancellation event instead of sleeping, so a caller that goes away can stop
it early. Every failure after validation ends as a terminal IngestionJob with
status "error" rather than an exception.
"""

import asyncio
import json
import math

import pydantic

from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.errors.app_errors import IngestionTimeoutError, ProviderError, ValidationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.ingestion import (
    ChunkingConfig,
    CustomMetadataEntry,
    IngestionErrorKind,
    IngestionJob,
    IngestionStatus,
    Operation,
    UploadedFile,
)

POLL_INTERVAL_SECONDS = 5
MAX_POLLS = 60  # 5 minutes at the default interval
TIMEOUT_MESSAGE = "Upload timeout - operation is still in progress"
CANCELLED_MESSAGE = "Polling cancelled - operation is still in progress"


def _as_finite_number(raw) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        number = float(raw)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class IngestionController:
    """Drives the upload → indexing → ready/error state machine for one file at a time."""

    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()
        self.poll_interval = helper_config.get_number_val("INGESTION_POLL_INTERVAL", default=POLL_INTERVAL_SECONDS)
        self.max_polls = int(helper_config.get_number_val("INGESTION_MAX_POLLS", default=MAX_POLLS))

    ##########################################
    ################ CORE ####################
    ##########################################

    async def ingest(
        self,
        client: LLMClientInterface,
        store_id: str,
        file: UploadedFile | None,
        display_name: str | None,
        chunking: ChunkingConfig | None = None,
        custom_metadata: list[CustomMetadataEntry] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> IngestionJob:
        """Upload a file into a store and wait for it to be indexed.

        Args:
            client (LLMClientInterface): Provider client bound to the caller's API key.
            store_id (str): Target store name.
            file (UploadedFile | None): The file to upload.
            display_name (str | None): Name shown for the document in the store.
            chunking (ChunkingConfig | None): Optional chunk size / overlap request.
            custom_metadata (list[CustomMetadataEntry] | None): Optional document metadata.
            cancel_event (asyncio.Event | None): Set it to stop polling early.

        Returns:
            IngestionJob: A terminal job (READY or ERROR).

        Raises:
            ValidationError: If the file or display name is missing.
        """
        if file is None or not file.file_name:
            raise ValidationError("File is required")
        if not display_name or not display_name.strip():
            raise ValidationError("displayName is required")

        job = IngestionJob(file_name=file.file_name, display_name=display_name, store_id=store_id)
        self.logging.info("Uploading '%s' to store %s...", display_name, store_id)

        chunking_config = self._build_chunking_config(client, chunking)
        metadata = self._coerce_custom_metadata(custom_metadata)

        try:
            operation = await client.do_upload_to_store(
                store_id,
                file,
                display_name,
                chunking_config=chunking_config,
                custom_metadata=client.build_custom_metadata(metadata) if metadata else None,
            )
        except ProviderError as e:
            return self._fail(job, e.message, IngestionErrorKind.UPLOAD_FAILED)

        job.operation_name = operation.name
        self._transition(job, IngestionStatus.INDEXING)

        try:
            operation = await self._poll_until_done(client, operation, cancel_event)
        except IngestionTimeoutError as e:
            job.operation_name = e.operation_name or job.operation_name
            return self._fail(job, e.message, IngestionErrorKind.TIMEOUT)
        except ProviderError as e:
            return self._fail(job, e.message, IngestionErrorKind.INDEXING_FAILED)

        if operation is None:
            return self._fail(job, CANCELLED_MESSAGE, IngestionErrorKind.CANCELLED)

        job.operation_name = operation.name or job.operation_name
        if operation.error_message:
            return self._fail(job, operation.error_message, IngestionErrorKind.INDEXING_FAILED)

        self._transition(job, IngestionStatus.READY)
        return job

    def start_ingest(self, *args, **kwargs) -> tuple[asyncio.Task, asyncio.Event]:
        """Schedule ingest() as a background task.

        Takes the same arguments as ingest() except cancel_event.

        Returns:
            tuple[asyncio.Task, asyncio.Event]: The task and the event that stops its polling.
        """
        cancel_event = asyncio.Event()
        task = asyncio.create_task(self.ingest(*args, cancel_event=cancel_event, **kwargs))
        return task, cancel_event

    async def get_operation_status(self, client: LLMClientInterface, operation_name: str) -> Operation:
        """Look up an indexing operation out-of-band, e.g. after a timeout."""
        if not operation_name:
            raise ValidationError("operationName is required")
        return await client.do_get_operation(operation_name)

    ##########################################
    ############### POLLING ##################
    ##########################################

    async def _poll_until_done(
        self,
        client: LLMClientInterface,
        operation: Operation,
        cancel_event: asyncio.Event | None,
    ) -> Operation | None:
        """Poll until the operation is done.

        Returns:
            Operation | None: The finished operation, or None if polling was cancelled.

        Raises:
            IngestionTimeoutError: When max_polls fetches did not report completion.
            ProviderError: When fetching the operation fails.
        """
        attempts = 0
        while not operation.done:
            if attempts >= self.max_polls:
                raise IngestionTimeoutError(TIMEOUT_MESSAGE, operation_name=operation.name)
            if await self._wait(cancel_event):
                self.logging.warning("Polling of %s cancelled after %d attempt(s).", operation.name, attempts)
                return None

            name = operation.name
            operation = await client.do_get_operation(name)
            operation.name = operation.name or name
            attempts += 1
            self.logging.debug("Poll %d/%d for %s: done=%s", attempts, self.max_polls, name, operation.done)
        return operation

    async def _wait(self, cancel_event: asyncio.Event | None) -> bool:
        """Wait one poll interval. Returns True if cancel_event was set meanwhile."""
        if cancel_event is None:
            await asyncio.sleep(self.poll_interval)
            return False
        if cancel_event.is_set():
            return True
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=self.poll_interval)
            return True
        except asyncio.TimeoutError:
            return False

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _build_chunking_config(self, client: LLMClientInterface, chunking: ChunkingConfig | None) -> dict | None:
        """Provider chunking strategy, or None so the provider default applies."""
        if chunking is None:
            return None
        if chunking.max_tokens_per_chunk is None and chunking.max_overlap_tokens is None:
            return None
        return client.build_chunking_config(chunking)

    def _coerce_custom_metadata(self, entries: list[CustomMetadataEntry] | None) -> list[CustomMetadataEntry]:
        """Give every entry exactly one value: numeric if it parses as a finite number, else string."""
        coerced: list[CustomMetadataEntry] = []
        for entry in entries or []:
            raw = entry.numeric_value if entry.numeric_value is not None else entry.string_value
            if raw is None:
                self.logging.debug("Dropping custom metadata '%s' without a value.", entry.key)
                continue
            number = _as_finite_number(raw)
            if number is not None:
                coerced.append(CustomMetadataEntry(key=entry.key, numeric_value=number))
            else:
                text = str(raw).lower() if isinstance(raw, bool) else str(raw)
                coerced.append(CustomMetadataEntry(key=entry.key, string_value=text))
        return coerced

    def _transition(self, job: IngestionJob, status: IngestionStatus) -> None:
        self.logging.info(
            "Ingestion '%s' (%s): %s -> %s",
            job.display_name, job.operation_name or "-", job.status.value, status.value,
            color="green" if status == IngestionStatus.READY else None,
        )
        job.status = status

    def _fail(self, job: IngestionJob, message: str, kind: IngestionErrorKind) -> IngestionJob:
        self.logging.error("Ingestion '%s' failed (%s): %s", job.display_name, kind.value, message)
        job.error = message or "Upload failed"
        job.error_kind = kind
        job.status = IngestionStatus.ERROR
        return job

    ##########################################
    ############### PARSING ##################
    ##########################################

    def parse_chunking_config(self, raw: str | None) -> ChunkingConfig | None:
        """Parse the chunkingConfig form field. Malformed input is logged and ignored."""
        if not raw:
            return None
        try:
            return ChunkingConfig.model_validate(json.loads(raw))
        except (ValueError, pydantic.ValidationError) as e:
            self.logging.warning("Ignoring malformed chunkingConfig: %s", e)
            return None

    def parse_custom_metadata(self, raw: str | None) -> list[CustomMetadataEntry] | None:
        """Parse the customMetadata form field. Malformed input is logged and ignored."""
        if not raw:
            return None
        try:
            parsed = json.loads(raw)
            if not isinstance(parsed, list) or not parsed:
                return None
            return [CustomMetadataEntry.model_validate(item) for item in parsed]
        except (ValueError, pydantic.ValidationError) as e:
            self.logging.warning("Ignoring malformed customMetadata: %s", e)
            return None
