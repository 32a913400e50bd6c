#!/usr/bin/env python3
"""
=============================================================================
NeuroGuide - Legacy Upload Migration
=============================================================================
Moves study guide PDFs that still live on disk (uploads/) into inline
compressed storage for every user, then optionally empties the upload
directory of files nothing references any more.

Usage: python scripts/migrate_legacy_uploads.py [--keep-files] [--clean]
=============================================================================
"""

import argparse
import sys
from pathlib import Path

from neuroguide.blob_storage import InlinePayloadStore
from neuroguide.config import settings
from neuroguide.database import Database
from neuroguide.repository import StudyGuideRepository
from neuroguide.study_guide_service import clean_legacy_upload_dir, migrate_legacy_study_guides


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Migrate legacy on-disk study guide PDFs into the database.")
    parser.add_argument("--keep-files", action="store_true", help="Leave migrated files on disk")
    parser.add_argument("--clean", action="store_true", help="Remove unreferenced files from the upload directory")
    parser.add_argument(
        "--upload-dir",
        default=settings.legacy_upload_dir,
        help=f"Legacy upload directory (default: {settings.legacy_upload_dir})",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    upload_dir = Path(args.upload_dir)

    print("=" * 80)
    print("NeuroGuide - Legacy Upload Migration")
    print("=" * 80)
    print(f"\nDatabase: {settings.database_url.split('@')[-1]}")
    print(f"Upload directory: {upload_dir}")

    database = Database(settings.database_url)
    database.init_db()
    payload_store = InlinePayloadStore(compression_level=settings.compression_level, legacy_root=upload_dir)

    with database.session_scope() as db:
        guides = StudyGuideRepository(db)

        pending = len(guides.list_legacy())
        print(f"\nFound {pending} study guides stored on disk")

        outcome = migrate_legacy_study_guides(guides, payload_store, remove_files=not args.keep_files)
        print(f"\n{outcome.message}")
        for error in outcome.errors:
            print(f"   - {error}")

        if args.clean:
            removed = clean_legacy_upload_dir(guides, payload_store, upload_dir)
            print(f"\nRemoved {len(removed)} unreferenced files from {upload_dir}")

    database.dispose()
    return 1 if outcome.errors else 0


if __name__ == "__main__":
    sys.exit(main())
