"""config_loading.py"""

from pathlib import Path

from clidispatch.config import loader

app = loader(Path(__file__).parent / "clidispatch.yaml")

if __name__ == "__main__":
    app.main()
