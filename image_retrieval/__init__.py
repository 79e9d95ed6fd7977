"""
image_retrieval — Content-based image retrieval with classic features.

Ranks a database of images against a query using interchangeable feature
extractors (center patch, chromaticity histograms, texture, a blue-scene
composite, and externally computed DNN embeddings) paired with matching
distance metrics.

Modules:
    preprocessing   Image validation, center patch, row bands
    histograms      rg-chromaticity histograms (whole, top/bottom)
    texture         Sobel gradient-magnitude histograms
    blue_scene      Blue dominance + texture + spatial composite
    distances       SSD, histogram intersection, weighted combinations, cosine
    vectors         Read-only vectors and named slice accessors
    methods         Extractor/metric records and dispatch
    scoring         Ranking and result formatting
    feature_store   CSV feature tables
    faiss_index     Exact FAISS indexes for SSD and cosine
    embeddings      ONNX embeddings through cv2.dnn
    index_builder   Batch extraction over a directory
    engine          SearchEngine
    config          Defaults and environment overrides
    cli             Command line entry point
"""

__version__ = "1.0.0"
