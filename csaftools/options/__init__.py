"""Command line options merged with TOML configuration files, and log levels."""