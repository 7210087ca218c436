"""General utilities: file names, JSON paths, hashes, CSV, URLs and HTTP clients."""