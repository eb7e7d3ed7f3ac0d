# flake8: noqa
# scripts/export_project_logs.py

import asyncio
import os
from enum import Enum

import typer

from fabtrack.core.config import settings
from fabtrack.core.persistence import PersistenceClient, PersistenceError
from fabtrack.domains.activity.schemas import ActivityLogEntry
from fabtrack.domains.activity.services import equipment_export_rows
from fabtrack.domains.vdcr.services import vdcr_log_export_rows
from fabtrack.utils.export import export_filename, to_csv

cli = typer.Typer()


class LogKind(str, Enum):
    VDCR = "vdcr"
    EQUIPMENT = "equipment"


async def export_logs(persistence: PersistenceClient, project_id: str, kind: LogKind, output_dir: str) -> None:
    """
    프로젝트의 활동 로그를 조회하여 대시보드 내보내기와 같은 형식의 CSV 파일로 저장합니다.
    """
    if kind == LogKind.VDCR:
        rows = await persistence.get_vdcr_activity_logs(project_id)
        export_rows = vdcr_log_export_rows(ActivityLogEntry.model_validate(row) for row in rows)
        base = "VDCR_Logs"
    else:
        rows = await persistence.get_equipment_activity_logs(project_id)
        export_rows = equipment_export_rows(ActivityLogEntry.model_validate(row) for row in rows)
        base = "Equipment_Logs"

    if not export_rows:
        print(f"내보낼 로그가 없습니다: project={project_id}, kind={kind.value}")
        return

    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, export_filename(base))
    with open(path, "w", encoding="utf-8") as f:
        f.write(to_csv(export_rows))
    print(f"{len(export_rows)}건의 로그를 저장했습니다: {path}")


@cli.command()
def main(
    project_id: str = typer.Option(
        ..., '--project-id', '-p',
        help="로그를 내보낼 프로젝트 ID입니다."
    ),
    kind: LogKind = typer.Option(
        LogKind.VDCR, '--kind', '-k',
        help="내보낼 로그 종류입니다. (vdcr / equipment)"
    ),
    output_dir: str = typer.Option(
        ".", '--output-dir', '-o',
        help="CSV 파일을 저장할 디렉토리입니다."
    ),
):
    """
    Fabtrack 프로젝트의 VDCR/설비 활동 로그를 CSV 파일로 내보냅니다.
    """
    async def run_export():
        persistence = PersistenceClient.from_settings(settings)
        try:
            await export_logs(persistence, project_id, kind, output_dir)
        finally:
            await persistence.aclose()

    try:
        asyncio.run(run_export())
    except PersistenceError as e:
        print(f"오류: 영속성 서비스 요청 실패 ({e.status_code}): {e.message}")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    cli()
