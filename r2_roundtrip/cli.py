import os
import sys
import logging
import argparse
from typing import Callable, List, Mapping, Optional

import uvloop

from r2_roundtrip.configuration import (
    DEFAULT_EVENTS_DIR,
    DEFAULT_LOG_LEVEL,
    ENV_LOG_LEVEL,
    Operation,
    StoreConfig,
    load_store_config,
)
from r2_roundtrip.errors import ConfigError, StoreError
from r2_roundtrip.models import BucketHandle, TransferRequest, build_sample_payload, summaries_to_json
from r2_roundtrip.observability.events import EventEmitter, LoggingSink
from r2_roundtrip.systems.r2 import R2System

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2

NOISY_LOGGERS = ('botocore', 'boto3', 'aioboto3', 'aiobotocore', 'urllib3', 's3transfer')


def configure_logging(level: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> None:
    """Set up logging (only if not already configured) and quiet the AWS SDK."""
    if environ is None:
        environ = os.environ
    level_name = (level or environ.get(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()
    numeric_level = getattr(logging, level_name, None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    if not logging.root.handlers:
        logging.basicConfig(level=numeric_level, format='%(asctime)s - %(levelname)s - %(message)s')
    logging.root.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class SimpleRoundTripCLI:
    """CLI interface for the R2 round-trip workflow."""

    def __init__(self, storage_factory: Callable[[StoreConfig], object] = R2System,
                 environ: Optional[Mapping[str, str]] = None):
        self.storage_factory = storage_factory
        self.environ = environ
        self.persistence = None
        self.parser = self._create_parser()

    def _create_parser(self):
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            prog='r2-roundtrip',
            description='Cloudflare R2 round-trip workflow',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Configuration comes from the environment:
  CLOUDFLARE_R2_BUCKET_NAME, CLOUDFLARE_R2_Access_Key_ID,
  CLOUDFLARE_R2_Secret_Access_Key, CLOUDFLARE_R2_S3_API (required)
  CLOUDFLARE_R2_OBJECT_KEY, CLOUDFLARE_R2_OPERATION (optional)

Examples:
  # Create bucket, upload sample JSON, read it back, list everything
  r2-roundtrip run --object-key hello.json

  # Read an existing object without writing
  r2-roundtrip run --object-key hello.json --operation READ_ONLY

  # Upload a local file and export metrics
  r2-roundtrip run --file report.json --metrics-port 9100
            """
        )
        parser.add_argument('--log-level', type=str, default=None,
                            help=f'Log level (default: ${ENV_LOG_LEVEL} or {DEFAULT_LOG_LEVEL})')

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        run_parser = subparsers.add_parser('run', help='Run the full round-trip')
        run_parser.add_argument('--object-key', type=str, default=None,
                                help='Object key (default: $CLOUDFLARE_R2_OBJECT_KEY or a timestamp)')
        run_parser.add_argument('--operation', choices=[op.value for op in Operation], default=None,
                                help='READ_ONLY skips the upload (default: $CLOUDFLARE_R2_OPERATION)')
        run_parser.add_argument('--file', type=str, default=None,
                                help='Upload the bytes of this file instead of the sample payload')
        run_parser.add_argument('--metrics-port', type=int, default=None,
                                help='Expose Prometheus metrics on this port')
        run_parser.add_argument('--events-dir', type=str, default=None,
                                help=f'Write a Parquet event log here (e.g. {DEFAULT_EVENTS_DIR})')

        get_parser = subparsers.add_parser('get', help='Read one object')
        get_parser.add_argument('key', type=str, help='Object key')

        subparsers.add_parser('list-objects', help='List objects in the bucket')
        subparsers.add_parser('list-buckets', help='List all buckets')

        return parser

    def _build_emitter(self, args) -> EventEmitter:
        emitter = EventEmitter([LoggingSink()])
        self.persistence = None

        if getattr(args, 'metrics_port', None):
            from r2_roundtrip.observability.prom import PrometheusExporter
            exporter = PrometheusExporter(port=args.metrics_port)
            exporter.start_server()
            emitter.add_sink(exporter)

        if getattr(args, 'events_dir', None):
            from r2_roundtrip.persistence.parquet import ParquetPersistence
            self.persistence = ParquetPersistence(args.events_dir)
            emitter.add_sink(self.persistence)

        return emitter

    def _build_request(self, args, config: StoreConfig) -> TransferRequest:
        if args.file:
            with open(args.file, 'rb') as f:
                payload = f.read()
            key = config.object_key or os.path.basename(args.file)
        else:
            payload = build_sample_payload()
            key = config.object_key
        return TransferRequest.for_payload(payload, key)

    async def run_workflow(self, args) -> int:
        """Run the full round-trip."""
        from r2_roundtrip.workflow.roundtrip import ObjectStoreWorkflow

        config = load_store_config(self.environ, object_key=args.object_key, operation=args.operation)
        request = self._build_request(args, config)
        emitter = self._build_emitter(args)

        logger.info("=== R2 Round-trip ===")
        async with self.storage_factory(config) as storage:
            workflow = ObjectStoreWorkflow(storage, config, emitter=emitter)
            report = await workflow.run(request)

        for document in summaries_to_json(report.objects):
            print(document)
        for document in summaries_to_json(report.buckets):
            print(document)

        if self.persistence is not None:
            path = self.persistence.save_to_file()
            if path:
                logger.info(f"Event log written to {path}")

        if report.succeeded:
            logger.info("ok")
            return EXIT_OK

        logger.error(f"Round-trip failed in state {report.state.value}: {report.error}")
        return EXIT_FAILED

    async def run_get(self, args) -> int:
        """Read a single object."""
        from r2_roundtrip.workflow.roundtrip import ObjectStoreWorkflow

        config = load_store_config(self.environ)
        async with self.storage_factory(config) as storage:
            workflow = ObjectStoreWorkflow(storage, config)
            try:
                result = await workflow.read_object(BucketHandle(config.bucket_name, created=False), args.key)
            except StoreError:
                return EXIT_FAILED

        print(f"{result.key}: {result.byte_count} bytes in {result.elapsed_seconds:.3f}s")
        return EXIT_OK

    async def run_list_objects(self, args) -> int:
        """List objects in the configured bucket."""
        from r2_roundtrip.workflow.roundtrip import ObjectStoreWorkflow

        config = load_store_config(self.environ)
        async with self.storage_factory(config) as storage:
            workflow = ObjectStoreWorkflow(storage, config)
            try:
                objects = await workflow.list_objects(BucketHandle(config.bucket_name, created=False))
            except StoreError:
                return EXIT_FAILED

        for document in summaries_to_json(objects):
            print(document)
        return EXIT_OK

    async def run_list_buckets(self, args) -> int:
        """List every bucket."""
        from r2_roundtrip.workflow.roundtrip import ObjectStoreWorkflow

        config = load_store_config(self.environ)
        async with self.storage_factory(config) as storage:
            workflow = ObjectStoreWorkflow(storage, config)
            try:
                buckets = await workflow.list_buckets()
            except StoreError:
                return EXIT_FAILED

        for document in summaries_to_json(buckets):
            print(document)
        return EXIT_OK

    async def dispatch(self, parsed_args) -> int:
        """Run the coroutine for the parsed command."""
        handlers = {
            'run': self.run_workflow,
            'get': self.run_get,
            'list-objects': self.run_list_objects,
            'list-buckets': self.run_list_buckets,
        }
        try:
            return await handlers[parsed_args.command](parsed_args)
        except ConfigError as e:
            logger.error(f"Configuration error: {e}")
            return EXIT_CONFIG

    def run(self, args: Optional[List[str]] = None) -> int:
        """Run the CLI with the given arguments."""
        if args is None:
            args = sys.argv[1:]

        parsed_args = self.parser.parse_args(args)
        configure_logging(parsed_args.log_level, self.environ)

        if not parsed_args.command:
            self.parser.print_help()
            return EXIT_FAILED

        try:
            return uvloop.run(self.dispatch(parsed_args))
        except KeyboardInterrupt:
            logger.info("Operation interrupted by user")
            return EXIT_FAILED
        except Exception as e:
            logger.error(f"Unexpected error: {e}")
            return EXIT_FAILED


def main():
    """Main entry point."""
    cli = SimpleRoundTripCLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
