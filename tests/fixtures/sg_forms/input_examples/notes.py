raise RuntimeError("not a test module, never loaded")
