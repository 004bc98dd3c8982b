import argparse
import asyncio
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from syllabus_rag.config import settings
from syllabus_rag.embeddings.embedder import Embedder
from syllabus_rag.rag.pipeline import build_pipeline
from syllabus_rag.store import (
    InMemoryVectorStore,
    SqlVectorStore,
    create_tables,
    get_engine,
    get_session_factory,
)


def parse_args():
    parser = argparse.ArgumentParser(
        description="Bulk (re)index syllabus text files for one owner."
    )
    parser.add_argument("owner_id", help="User id that will own the chunks")
    parser.add_argument("files", nargs="+", type=Path, help="Plain-text syllabus files")
    parser.add_argument(
        "--class-label",
        help="Class label for every file (defaults to the file name stem)",
    )
    return parser.parse_args()


async def main():
    args = parse_args()

    print("Initializing clients...")
    if settings.vector_store_backend == "postgres":
        await create_tables(get_engine())
        store = SqlVectorStore(get_session_factory())
    else:
        print("Warning: memory backend selected, chunks will not survive this run.")
        store = InMemoryVectorStore()

    pipeline = build_pipeline(store, Embedder(settings), settings)

    total = 0
    for i, path in enumerate(args.files):
        label = args.class_label or path.stem
        print(f"Processing ({i+1}/{len(args.files)}): {path} as '{label}'")

        text = path.read_text(encoding="utf-8", errors="replace")
        # File path doubles as the document id so re-runs replace, not duplicate
        count = await pipeline.reindex_document(args.owner_id, str(path), label, text)
        print(f"  {count} chunks")
        total += count

    stats = await pipeline.stats(args.owner_id)
    print(
        f"Done! Indexed {total} chunks. Owner now has {stats['total_chunks']} chunks "
        f"across {stats['total_documents']} documents."
    )

    if settings.vector_store_backend == "postgres":
        await get_engine().dispose()


if __name__ == "__main__":
    asyncio.run(main())
