"""I/O layer: table codecs, reference collection readers and HTTP connectors."""
