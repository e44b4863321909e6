"""
Fill the database with a synthetic folder hierarchy and files.
"""
import argparse
import logging
import random
import time
from typing import Dict, List, Optional

from dotenv import load_dotenv

load_dotenv()

from explorer.database import Base, SessionLocal, engine  # noqa: E402
from explorer.models.file import File  # noqa: E402
from explorer.models.folder import Folder  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

ROOT_FOLDER_COUNT = 20
PARENT_ATTEMPTS = 10

FOLDER_PREFIXES = [
    "Documents", "Projects", "Reports", "Assets", "Media", "Archive",
    "Backup", "Temp", "Work", "Personal", "Client", "Data", "Images",
    "Videos", "Music", "Downloads", "Templates", "Configs", "Logs",
    "Build", "Dist", "Source", "Tests", "Docs", "Resources", "Public",
]

FILE_PREFIXES = [
    "report", "document", "invoice", "contract", "presentation", "data",
    "config", "readme", "notes", "summary", "analysis", "proposal",
    "budget", "plan", "schedule", "image", "video", "backup", "export",
]

FILE_EXTENSIONS = [
    ".pdf", ".docx", ".xlsx", ".txt", ".md", ".json", ".csv",
    ".png", ".jpg", ".mp4", ".zip", ".html", ".xml", ".yaml",
]


def folder_name(rng: random.Random, index: int) -> str:
    return f"{rng.choice(FOLDER_PREFIXES)}_{rng.randint(1, 999)}_{index}"


def file_name(rng: random.Random, index: int) -> str:
    return f"{rng.choice(FILE_PREFIXES)}_{rng.randint(1, 9999)}_{index}{rng.choice(FILE_EXTENSIONS)}"


def pick_parent(
    rng: random.Random,
    folder_ids: List[int],
    depths: Dict[int, int],
    max_depth: int,
) -> Optional[int]:
    """Pick a random existing folder shallower than `max_depth`, or None for a root."""
    if not folder_ids:
        return None
    for _ in range(PARENT_ATTEMPTS):
        candidate = rng.choice(folder_ids)
        if depths[candidate] < max_depth:
            return candidate
    return None


def clear_database(db):
    logger.info("Clearing existing data...")
    db.query(File).delete(synchronize_session=False)
    db.query(Folder).delete(synchronize_session=False)
    db.commit()


def seed_folders(db, rng: random.Random, count: int, max_depth: int, batch_size: int) -> List[int]:
    logger.info(f"Creating {count:,} folders...")
    start_time = time.time()
    folder_ids: List[int] = []
    depths: Dict[int, int] = {}

    for batch_start in range(0, count, batch_size):
        batch_end = min(batch_start + batch_size, count)
        batch = []
        for index in range(batch_start, batch_end):
            parent_id = None
            if index >= ROOT_FOLDER_COUNT:
                parent_id = pick_parent(rng, folder_ids, depths, max_depth)
            batch.append(Folder(name=folder_name(rng, index), parent_id=parent_id))

        db.add_all(batch)
        db.flush()
        for folder in batch:
            folder_ids.append(folder.id)
            depths[folder.id] = depths[folder.parent_id] + 1 if folder.parent_id else 1
        db.commit()

        logger.info(f"Folders: {batch_end:,}/{count:,} ({round(batch_end / count * 100)}%)")

    logger.info(f"Created {len(folder_ids):,} folders in {time.time() - start_time:.2f}s")
    return folder_ids


def seed_files(db, rng: random.Random, folder_ids: List[int], count: int, batch_size: int):
    if count and not folder_ids:
        logger.warning(f"No folders to hold {count:,} files, skipping file seeding")
        return

    logger.info(f"Creating {count:,} files...")
    start_time = time.time()

    for batch_start in range(0, count, batch_size):
        batch_end = min(batch_start + batch_size, count)
        db.bulk_insert_mappings(File, [
            {"name": file_name(rng, index), "folder_id": rng.choice(folder_ids)}
            for index in range(batch_start, batch_end)
        ])
        db.commit()
        logger.info(f"Files: {batch_end:,}/{count:,} ({round(batch_end / count * 100)}%)")

    logger.info(f"Created {count:,} files in {time.time() - start_time:.2f}s")


def show_stats(db):
    folder_count = db.query(Folder).count()
    file_count = db.query(File).count()
    root_count = db.query(Folder).filter(Folder.parent_id.is_(None)).count()
    logger.info(f"Total folders: {folder_count:,}")
    logger.info(f"Root folders: {root_count:,}")
    logger.info(f"Total files: {file_count:,}")
    if folder_count:
        logger.info(f"Avg files per folder: {file_count / folder_count:.1f}")


def main():
    parser = argparse.ArgumentParser(description="Seed the explorer database with synthetic data")
    parser.add_argument("--folders", type=int, default=10_000, help="Number of folders to create")
    parser.add_argument("--files", type=int, default=50_000, help="Number of files to create")
    parser.add_argument("--max-depth", type=int, default=8, help="Maximum folder nesting depth")
    parser.add_argument("--batch-size", type=int, default=1000, help="Rows inserted per commit")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible data")
    args = parser.parse_args()

    if args.folders < 0 or args.files < 0:
        parser.error("--folders and --files must be 0 or greater")

    rng = random.Random(args.seed)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        total_start = time.time()
        clear_database(db)
        folder_ids = seed_folders(db, rng, args.folders, args.max_depth, args.batch_size)
        seed_files(db, rng, folder_ids, args.files, args.batch_size)
        show_stats(db)
        logger.info(f"Seed completed in {time.time() - total_start:.2f}s")
    except Exception:
        db.rollback()
        logger.exception("Seed failed")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
