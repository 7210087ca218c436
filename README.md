# csaftools

Building blocks for programs that work with CSAF (Common Security Advisory
Framework) documents: file name rules, JSON path extraction, hash sum files,
HTTP client wrappers, time ranges, command line options and client
certificates.

## Modules

- `csaftools.util.files`: `clean_file_name` lower-cases a name, turns every
  run of characters other than `a`-`z`, `0`-`9`, `+` and `-` into one `_`,
  and makes sure it ends in `.json`. `conforming_file_name` tells whether a
  name is already clean. `id_matches_filename` checks a document's
  `document/tracking/id` against a file name and raises `ValueError` on a
  mismatch. Also `path_exists`, `write_to_file` (hands an open binary file to
  a callback), `deep_copy` (recreates a directory tree, hard-linking regular
  files), `make_uniq_file` and `make_uniq_dir` (names with a date stamp, plus
  a random suffix on collision) and `NWriter`, which counts the bytes written
  through it in `n`.
- `csaftools.util.patheval`: `PathEval` evaluates JSONPath expressions on
  decoded JSON and caches compiled expressions. `extract` hands a result to
  an action, `match` applies a list of `PathEvalMatcher` entries, and
  `strings` returns string results. Matchers store what they see in
  attributes: `StringMatcher.value`, `BoolMatcher.value`, `TimeMatcher.value`
  (parsed with a `strptime` format, or ISO 8601 when none is given),
  `StringTreeMatcher.strings` (unique strings from nested lists) and
  `ReMarshalMatcher.value` (a JSON round trip through an optional factory).
  Also `re_marshal_json` and `as_strings`.
- `csaftools.util.jsonpath`: `compile_expression` supports `$`, `.name`,
  `['name']`, `[n]`, `[start:stop:step]`, `*`, `..` and unions `[a, b]`.
  Malformed expressions and missing members raise `ExpressionError`.
- `csaftools.util.hashsum`: `hash_from_reader` and `hash_from_file` read the
  hex hash from the first line that starts with hex digits (or return
  `None`); `write_hash_to_file` and `write_hash_sum_to_file` write
  `"<hex> <name>\n"` lines. Any `hashlib`-style object serves as hasher.
- `csaftools.util.csvwriter`: `FullyQuotedCSVWriter` puts every field in
  double quotes, with a configurable separator and optional CRLF line ends.
  Output is buffered; call `flush` or use it as a context manager.
- `csaftools.util.urls`: `base_url` returns a URL up to and including the
  last `/` of its path.
- `csaftools.util.client`: stackable HTTP clients built on `requests`.
  `SessionClient` sends the requests, `LoggingClient` logs method and URL
  (to a callback or the `logging` module), `LimitingClient` waits on a
  token-bucket `RateLimiter`, and `HeaderClient` adds extra header fields
  without changing the caller's request. All offer `do`, `get`, `head`,
  `post` and `post_form`.
- `csaftools.filter`: `PatternMatcher` compiles regular expressions
  (`ValueError` for invalid ones) and `matches` tells whether any of them is
  found in a string.
- `csaftools.models`: `TimeRange` with `contains`, `intersects` and
  `to_json`. `TimeRange.parse` reads a duration back from now (`3h`, `2y1d`,
  `13M`; `y`, `M` and `d` count calendar years, months and days), a start
  date until now, or `start, end`. Dates may be RFC 3339 or shortened down
  to a year. Also `new_time_interval`, `guess_date` and `parse_duration`.
- `csaftools.options.loglevel`: `LogLevel` with `from_flag` and `to_flag`
  for `debug`, `info`, `warn` and `error`, with optional `+N`/`-N` offsets.
- `csaftools.options.parser`: `Parser` fills a configuration dataclass from
  command line options and, if one is named or found among
  `default_config_locations`, a TOML file; explicit options override the
  file. Field metadata keys `long`, `short`, `description`, `type`, `item`
  and `toml` shape the options. `--help` and a version request print and
  raise `SystemExit(0)`. Also `find_config_file`, `load_toml` (unknown keys
  raise `ValueError`), `expand_home` and `error_check`.
- `csaftools.mime`: `MultipartWriter` writes multipart bodies;
  `create_form_file` starts a form-data file part with its own content type.
- `csaftools.certs`: `load_certificate` loads a PEM certificate chain and its
  private key, optionally encrypted with a passphrase, and checks that they
  belong together.

## Examples

```python
from csaftools.util.files import clean_file_name, conforming_file_name

clean_file_name("abc.html")                                # 'abc_html.json'
conforming_file_name("cisco-sa-20190513-secureboot.json")  # True
conforming_file_name("HELLO")                              # False
```

```python
from csaftools.util.patheval import PathEval

doc = {"document": {"tracking": {"id": "example-2024-0001"}}}
PathEval().eval("$.document.tracking.id", doc)  # 'example-2024-0001'
```

```python
from datetime import datetime, timezone
from csaftools.models import TimeRange

span = TimeRange.parse("2009-11-10, 2010-11-10")
span.contains(datetime(2010, 3, 10, tzinfo=timezone.utc))  # True
```

## What it does not do

This is a library only. It installs no commands: there is no downloader,
checker, validator or uploader program, no validation of documents against
the CSAF JSON schema and no OpenPGP signing or signature checking.

## Requirements

Python 3.11 or later, with `requests` and `cryptography`.