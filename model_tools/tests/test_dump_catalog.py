from unittest.mock import MagicMock, patch

import pytest
import yaml

from model_tools import dump_catalog
from model_tools.shared.catalog import ColumnMetadata
from model_tools.shared.errors import CatalogError
from model_tools.shared.snapshot import SnapshotCatalog


class TestMain:
    def test_dump(self, tmp_path, capsys):
        catalog = SnapshotCatalog(
            "shop",
            [
                ColumnMetadata("users", "id", data_type="int", key="PRI"),
                ColumnMetadata("users", "email", data_type="varchar", length=128),
            ],
        )
        output = tmp_path / "shop.yaml"

        with patch.object(dump_catalog, "open_catalog", return_value=catalog) as mock_open:
            dump_catalog.main([str(output), "--dsn", "mysql+pymysql://u:p@db/shop"])

        mock_open.assert_called_once_with("mysql+pymysql://u:p@db/shop", None)
        assert "Wrote 2 column(s)" in capsys.readouterr().out
        data = yaml.safe_load(output.read_text(encoding="utf-8"))
        assert [c["column"] for c in data["columns"]] == ["id", "email"]

    def test_dump_without_dsn(self, tmp_path, monkeypatch):
        monkeypatch.delenv("MODEL_TOOLS_DSN", raising=False)

        with pytest.raises(SystemExit) as exc_info:
            dump_catalog.main([str(tmp_path / "shop.yaml")])

        assert "Error:" in str(exc_info.value)
        assert not (tmp_path / "shop.yaml").exists()

    def test_dump_closes_catalog_on_failure(self, tmp_path):
        catalog = MagicMock()
        catalog.current_database.side_effect = CatalogError("connection refused")

        with patch.object(dump_catalog, "open_catalog", return_value=catalog):
            with pytest.raises(SystemExit) as exc_info:
                dump_catalog.main([str(tmp_path / "shop.yaml"), "--dsn", "sqlite://"])

        assert "connection refused" in str(exc_info.value)
        catalog.close.assert_called_once_with()
