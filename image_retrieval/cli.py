"""Command line interface."""

import argparse
import logging
import os
import sys
from typing import List, Optional

import cv2

from .config import RetrievalConfig
from .embeddings import OnnxEmbedder
from .engine import SearchEngine
from .errors import RetrievalError
from .index_builder import build_embedding_database, build_feature_database
from .methods import METHOD_NAMES, get_method
from .scoring import format_matches

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="image-retrieval")
    parser.add_argument("--log-level", default="INFO", help="Logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser("extract", help="Build a feature table from a directory")
    extract_parser.add_argument("image_dir")
    extract_parser.add_argument("output_csv")
    extract_parser.add_argument("--method", choices=METHOD_NAMES, default="baseline")

    query_parser = subparsers.add_parser("query", help="Find the images closest to a target")
    query_parser.add_argument("target_image")
    query_parser.add_argument("feature_csv")
    query_parser.add_argument("num_matches", type=_positive_int)
    query_parser.add_argument("--method", choices=METHOD_NAMES, default="baseline")
    query_parser.add_argument("--dnn-csv", help="Embedding table (custom method)")
    query_parser.add_argument("--faiss", action="store_true", help="Use a FAISS index where possible")

    embed_parser = subparsers.add_parser("embed", help="Compute DNN embeddings with an ONNX model")
    embed_parser.add_argument("model_path")
    embed_parser.add_argument("image_dir")
    embed_parser.add_argument("output_csv")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "extract":
            return _extract(args)
        if args.command == "query":
            return _query(args)
        if args.command == "embed":
            return _embed(args)
    except (RetrievalError, FileNotFoundError, KeyError) as e:
        logger.error(str(e))
        return 1

    parser.print_help()
    return 1


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _extract(args) -> int:
    method = get_method(args.method, RetrievalConfig.from_env())
    if method.precomputed:
        logger.error("DNN features are computed with the 'embed' command")
        return 1
    summary = build_feature_database(args.image_dir, args.output_csv, method.extractor)
    return 0 if summary["success"] else 1


def _embed(args) -> int:
    embedder = OnnxEmbedder(args.model_path)
    summary = build_embedding_database(args.image_dir, args.output_csv, embedder)
    return 0 if summary["success"] else 1


def _query(args) -> int:
    engine = SearchEngine(args.method, args.feature_csv, dnn_csv=args.dnn_csv,
                          use_faiss=args.faiss)
    target_name = os.path.basename(args.target_image)

    if engine.method.precomputed:
        results = engine.search_by_name(target_name, args.num_matches)
    else:
        image = cv2.imread(args.target_image)
        if image is None:
            logger.error(f"Failed to load target image: {args.target_image}")
            return 1
        results = engine.search(image, args.num_matches, query_name=target_name)

    print(format_matches(results, args.num_matches))
    return 0


if __name__ == "__main__":
    sys.exit(main())
