"""HTTP surface for storegate: session lifecycle, permission queries and guarded pages."""
