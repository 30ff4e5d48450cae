"""Tests for lead_engine/database.py — URL handling and engine construction."""
from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from lead_engine.database import normalize_url, make_engine


class TestNormalizeUrl:

    def test_rewrites_legacy_postgres_scheme(self):
        assert normalize_url('postgres://u:p@host:5432/crm') == 'postgresql://u:p@host:5432/crm'

    def test_leaves_other_urls_alone(self):
        assert normalize_url('postgresql://host/crm') == 'postgresql://host/crm'
        assert normalize_url('sqlite:///local.db') == 'sqlite:///local.db'


class TestMakeEngine:

    def test_in_memory_sqlite_shares_one_connection(self):
        engine = make_engine('sqlite://')
        assert isinstance(engine.pool, StaticPool)

        with engine.begin() as conn:
            conn.execute(text('CREATE TABLE t (x INTEGER)'))
        with engine.connect() as conn:
            assert conn.execute(text('SELECT count(*) FROM t')).scalar() == 0
        engine.dispose()

    def test_file_sqlite_uses_default_pool(self, tmp_path):
        engine = make_engine(f'sqlite:///{tmp_path / "local.db"}')
        assert not isinstance(engine.pool, StaticPool)
        engine.dispose()
