"""RegionQueryProcessor Implementation

This module implements the RegionQueryProcessor class, which runs region queries
end to end by implementing the ModuleProcessor interface:

parse -> build -> connect -> evaluate -> write

Every failure is tagged with the stage it happened in and surfaces unchanged;
a failed query never produces an output file.
"""

import logging
import time
from contextlib import ExitStack, contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

from pydantic import ValidationError

from inspection.config import ConfigLoader, StoreSettings
from inspection.connection import StoreConnector
from inspection.exceptions import RQBaseException, RQConfigurationError, RQProcessingError
from inspection.interfaces import ModuleProcessor, ProcessingResult, ModuleStatus
from inspection.utils import log_performance
from ..evaluator import QueryEvaluator, QueryExecutionResult, QueryProcessingConfig, ResultFinalizer
from ..output import write_points
from ..point_store import InMemoryPointStore, PointStore, PostgresPointStore, load_inspection_points
from ..tree_builder import QueryTreeBuilder, load_query_document

logger = logging.getLogger(__name__)

MODULE_NAME = "region_query"


@contextmanager
def processing_stage(stage: str) -> Iterator[None]:
    """Tag any error raised inside the block with the stage name."""
    try:
        yield
    except RQBaseException as e:
        raise e.with_stage(stage)
    except Exception as e:
        raise RQProcessingError(f"Unexpected error: {e}", {"stage": stage}) from e


class RegionQueryProcessor(ModuleProcessor):
    """Region query processor implementing the ModuleProcessor interface.

    The point store is opened once per run, passed explicitly to the evaluator
    and released before the output is written. A store may also be injected,
    in which case its lifetime belongs to the caller.
    """

    def __init__(self, config_loader: ConfigLoader, environment: str = "development",
                 store_overrides: Optional[Dict[str, Any]] = None,
                 store: Optional[PointStore] = None):
        """Initialize the processor with shared configuration.

        Args:
            config_loader: ConfigLoader instance providing access to framework configuration
            environment: Environment whose configuration is used
            store_overrides: Store settings replacing configured values (e.g. data_directory)
            store: Pre-built point store to query instead of opening one from configuration
        """
        self.config_loader = config_loader
        self.environment = environment
        self._store_overrides = store_overrides or {}
        self._store = store
        self._processing_config: Optional[QueryProcessingConfig] = None
        self._store_settings: Optional[StoreSettings] = None
        self._configuration_valid: Optional[bool] = None
        self._last_run: Optional[datetime] = None
        self._last_error: Optional[str] = None
        self.tree_builder = QueryTreeBuilder()

        logger.info(f"RegionQueryProcessor initialized for environment: {environment}")

    def _get_processing_config(self) -> QueryProcessingConfig:
        if self._processing_config is None:
            section = self.config_loader.get_section(self.environment, "processing")
            try:
                self._processing_config = QueryProcessingConfig(**section)
            except ValidationError as e:
                raise RQConfigurationError(
                    f"Invalid processing configuration: {e.errors()[0]['msg']}",
                    {"environment": self.environment}
                )
        return self._processing_config

    def _get_store_settings(self) -> StoreSettings:
        if self._store_settings is None:
            self._store_settings = self.config_loader.get_store_settings(
                self.environment, self._store_overrides
            )
        return self._store_settings

    def validate_configuration(self) -> bool:
        """Validate processing and store configuration.

        Returns:
            bool: True if configuration is valid and complete, False otherwise
        """
        if self._configuration_valid is not None:
            return self._configuration_valid

        try:
            processing_config = self._get_processing_config()
            logger.debug(f"Processing configuration: {processing_config.model_dump()}")

            if self._store is None:
                settings = self._get_store_settings()
                logger.debug(f"Point store backend: {settings.backend}")
            else:
                logger.debug(f"Using injected point store: {type(self._store).__name__}")

            self._configuration_valid = True
            logger.info("Module configuration validation successful")
        except RQBaseException as e:
            logger.error(f"Configuration validation failed: {e}")
            self._configuration_valid = False

        return self._configuration_valid

    @contextmanager
    def _open_store(self) -> Iterator[PointStore]:
        """Open the configured point store for the duration of the block."""
        if self._store is not None:
            yield self._store
            return

        settings = self._get_store_settings()
        if settings.backend == "memory":
            yield InMemoryPointStore.from_data_directory(settings.data_directory)
            return

        with StoreConnector(settings) as connector:
            yield PostgresPointStore(connector.get_connection())

    @log_performance
    def run_query(self, query_path: Union[str, Path], output_path: Union[str, Path],
                  dry_run: bool = False) -> QueryExecutionResult:
        """Run one query through every stage.

        Args:
            query_path: Path of the JSON query description
            output_path: Path the ordered results are written to
            dry_run: If True, evaluate but do not write the output file

        Returns:
            QueryExecutionResult with the ordered points and evaluation metrics

        Raises:
            RQBaseException: Any failure, with ``context["stage"]`` naming the stage
        """
        start_time = time.time()

        with processing_stage("configure"):
            config = self._get_processing_config()

        with processing_stage("parse"):
            document = load_query_document(query_path)

        with processing_stage("build"):
            tree = self.tree_builder.build(document)

        with ExitStack() as stack:
            with processing_stage("connect"):
                store = stack.enter_context(self._open_store())
                logger.info(f"Point store ready: {type(store).__name__} "
                            f"with {store.point_count()} points")

            with processing_stage("evaluate"):
                evaluator = QueryEvaluator(store, config.parallel_workers)
                with store.snapshot():
                    result_set = evaluator.evaluate(tree)
                points = ResultFinalizer(config.tie_break_by_id).finalize(result_set)

        written = False
        if dry_run:
            logger.info(f"Dry run: skipping output for {len(points)} points")
        else:
            with processing_stage("write"):
                write_points(points, output_path, config.coordinate_format)
            written = True

        result = QueryExecutionResult(
            points=points,
            tree_summary=tree.describe(),
            metrics=evaluator.metrics,
            output_path=str(output_path),
            written=written,
            processing_duration=time.time() - start_time
        )
        logger.info(result.get_processing_summary())
        return result

    def process(self, query_path: str, output_path: str, dry_run: bool = False) -> ProcessingResult:
        """Run a query and report the outcome as a ProcessingResult.

        Args:
            query_path: Path of the JSON query description
            output_path: Path the ordered results are written to
            dry_run: If True, evaluate but do not write the output file

        Returns:
            ProcessingResult: Standardized result object with success status, metrics, and errors
        """
        start_time = time.time()
        logger.info(f"Starting region query {query_path} -> {output_path} (dry_run={dry_run})")

        try:
            result = self.run_query(query_path, output_path, dry_run)
        except RQBaseException as e:
            stage = e.stage or "processing"
            self._last_error = str(e)
            logger.error(f"Query failed during {stage} stage: {e}")
            return ProcessingResult(
                success=False,
                records_processed=0,
                errors=[f"{stage} stage failed: {e}"],
                metadata={"dry_run": dry_run, "stage": stage, "error_type": type(e).__name__},
                execution_time=time.time() - start_time
            )

        self._last_run = datetime.now()
        self._last_error = None
        return ProcessingResult(
            success=True,
            records_processed=result.result_count,
            metadata={
                "dry_run": dry_run,
                "output_path": result.output_path if result.written else None,
                "tree": result.tree_summary,
                "metrics": result.metrics.get_summary(),
            },
            execution_time=result.processing_duration
        )

    def load_data(self, data_directory: Union[str, Path]) -> ProcessingResult:
        """Bulk-load inspection point files into the PostgreSQL point store.

        Args:
            data_directory: Directory containing points.txt, categories.txt and groups.txt

        Returns:
            ProcessingResult with the number of points submitted
        """
        start_time = time.time()

        try:
            with processing_stage("configure"):
                settings = self._get_store_settings()
                if settings.backend != "postgresql":
                    raise RQConfigurationError(
                        "Bulk loading requires the postgresql store backend",
                        {"backend": settings.backend}
                    )

            with processing_stage("parse"):
                points = load_inspection_points(data_directory)

            with processing_stage("connect"), StoreConnector(settings) as connector:
                store = PostgresPointStore(connector.get_connection())
                with processing_stage("load"):
                    store.ensure_schema()
                    loaded = store.bulk_load(points)
        except RQBaseException as e:
            stage = e.stage or "processing"
            self._last_error = str(e)
            logger.error(f"Data loading failed during {stage} stage: {e}")
            return ProcessingResult(
                success=False,
                records_processed=0,
                errors=[f"{stage} stage failed: {e}"],
                metadata={"stage": stage, "error_type": type(e).__name__},
                execution_time=time.time() - start_time
            )

        self._last_run = datetime.now()
        self._last_error = None
        return ProcessingResult(
            success=True,
            records_processed=loaded,
            metadata={"data_directory": str(data_directory)},
            execution_time=time.time() - start_time
        )

    def get_status(self) -> ModuleStatus:
        """Get current module processing status.

        Returns:
            ModuleStatus: Current module status and health information
        """
        is_configured = self.validate_configuration()

        if not is_configured:
            status = "error"
        elif self._last_error is not None:
            status = "error"
        else:
            status = "ready"

        return ModuleStatus(
            module_name=MODULE_NAME,
            is_configured=is_configured,
            last_run=self._last_run,
            status=status,
            health_check=is_configured and self._last_error is None
        )
