import atexit
import os
import shutil
import sys
import tempfile

# Dossiers temporaires pour les images et les logs, avant l'import de main
_tmp_dir = tempfile.mkdtemp(prefix="catalog-service-tests-")
atexit.register(shutil.rmtree, _tmp_dir, ignore_errors=True)
os.environ["UPLOAD_DIR"] = os.path.join(_tmp_dir, "uploads")
os.environ["LOG_FILE"] = os.path.join(_tmp_dir, "logs.json")

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
