from __future__ import annotations

import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="kharji-tests-")

# must be set before kharji.shared.config is first imported
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TMP, 'kharji.db')}")
os.environ.setdefault("LOG_FILE", os.path.join(_TMP, "app.log"))
os.environ.setdefault("JWT_SECRET", "test-secret-with-enough-entropy-0123456789")
os.environ.setdefault("APP_ENV", "test")
