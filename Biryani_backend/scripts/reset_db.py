import asyncio
from pathlib import Path

from app.config import settings
from app.database import build_engine, create_tables


async def recreate_db(db_path: str | Path):
    # 删除旧的 SQLite 文件后重建表结构
    path = Path(db_path)
    if path.exists():
        path.unlink()
    engine = build_engine(str(path))
    try:
        await create_tables(engine)
    finally:
        await engine.dispose()


if __name__ == '__main__':
    asyncio.run(recreate_db(settings.DATABASE_PATH))
    print(f'Database recreated at {settings.DATABASE_PATH}.')
