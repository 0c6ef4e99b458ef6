"""Small helpers shared across the compiler, engine and loaders."""
