"""
SQL Backup - 主程序入口

不依赖 mysqldump，仅通过数据库自身的内省命令生成可重放的 SQL 备份。
"""

import sys
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from dotenv import load_dotenv

from sqlbackup.config import AppConfig
from sqlbackup.dumper import DatabaseDumper
from sqlbackup.errors import DumpError
from sqlbackup.introspector import MySQLIntrospector
from sqlbackup.models.dump import DumpResult
from sqlbackup.sink import OutputSink, backup_path, open_file_sink

# stdout may carry the dump itself
console = Console(stderr=True)


def setup_logging(level: str):
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@click.command()
# MySQL - Set defaults to None to allow .env override
@click.option("--host", "-h", default=None, help="MySQL 主机地址 (默认: localhost)")
@click.option("--port", "-p", default=None, type=int, help="MySQL 端口 (默认: 3306)")
@click.option("--database", "-d", required=False, help="数据库名称 (可选，可经由环境变量配置)")
@click.option("--user", "-u", required=False, help="数据库用户名 (默认: root)")
@click.option("--password", "-P", required=False, help="数据库密码 (默认: 空)", hide_input=True)
# Selection
@click.option("--tables", "-t", default=None, help="要备份的表/视图, 逗号分隔, 支持前缀通配 (例: wp_*,log)")
@click.option("--show", "-s", default=None, help="要生成的部分: DB,TABLES,VIEWS,ROUTINES,DATA (默认: 全部)")
@click.option("--batch-size", default=None, type=int, help="每条 INSERT 的最大行数 (默认: 1000)")
# Output
@click.option("--folder", "-o", default=None, help="备份文件目录 (默认: 系统临时目录)")
@click.option("--stdout", "to_stdout", is_flag=True, help="直接输出到标准输出而不写文件")
# Environment
@click.option("--env-file", "-e", default=".env", help=".env 文件路径")
# Misc
@click.option("--verbose", "-v", is_flag=True, help="详细输出")
def main(
    host: Optional[str],
    port: Optional[int],
    database: Optional[str],
    user: Optional[str],
    password: Optional[str],
    tables: Optional[str],
    show: Optional[str],
    batch_size: Optional[int],
    folder: Optional[str],
    to_stdout: bool,
    env_file: str,
    verbose: bool,
):
    """
    SQL Backup - MySQL 逻辑备份工具

    读取表、视图、存储过程与函数的定义以及全部数据，生成可重放的 SQL 文件。
    """
    if Path(env_file).exists():
        load_dotenv(env_file)

    try:
        config = AppConfig.from_args(
            host=host,
            port=port,
            database=database,
            user=user,
            password=password,
            tables=tables,
            show=show,
            folder=folder,
            batch_size=batch_size,
            verbose=verbose,
        )
    except ValidationError as e:
        console.print("[bold red]错误: 配置无效 (必须提供数据库名称, 通过参数或 .env)[/bold red]")
        console.print(str(e))
        sys.exit(1)

    setup_logging(config.log_level)

    console.print(Panel.fit(
        "[bold blue]SQL Backup[/bold blue]\n"
        "MySQL 逻辑备份工具",
        border_style="blue"
    ))

    dump = config.dump
    console.print(f"\n[cyan]连接数据库:[/cyan] {config.database.host}:{config.database.port}/{config.database.database}")
    console.print(f"[cyan]备份对象:[/cyan] {', '.join(dump.tables) if dump.tables else '全部'}")
    console.print(f"[cyan]生成部分:[/cyan] {', '.join(s.value for s in dump.show) if dump.show else '全部'}")
    if not to_stdout:
        console.print(f"[cyan]输出目录:[/cyan] {dump.output_folder}")
    console.print("")

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            disable=to_stdout,
        ) as progress:
            task = progress.add_task("[cyan]生成备份...", total=None)
            result = run_backup(config, to_stdout=to_stdout)
            progress.update(task, description=f"[green]✓ 备份了 {len(result.tables)} 个表，{result.row_count} 行")
    except DumpError as e:
        console.print(f"\n[bold red]错误:[/bold red] {str(e)}")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        sys.exit(1)

    print_summary(result)


def run_backup(config: AppConfig, to_stdout: bool = False) -> DumpResult:
    """Run one backup from an AppConfig object.

    Args:
        config: Application configuration
        to_stdout: Write the dump to standard output instead of a file

    Returns:
        DumpResult of the run; ``path`` is set when a file was written
    """
    with MySQLIntrospector(config.database) as introspector:
        if to_stdout:
            sink = OutputSink(sys.stdout)
        else:
            path = backup_path(config.dump.output_folder, config.database.database, datetime.now())
            sink = open_file_sink(path)
        with sink:
            dumper = DatabaseDumper(introspector, config.dump)
            return dumper.run(sink)


def print_summary(result: DumpResult):
    console.print("\n")
    console.print(Panel.fit(
        "[bold green]✓ 备份完成！[/bold green]",
        border_style="green"
    ))

    summary_table = Table(title="备份摘要", show_header=True)
    summary_table.add_column("指标", style="cyan")
    summary_table.add_column("数值", style="green")

    summary_table.add_row("表", str(len(result.tables)))
    summary_table.add_row("视图", str(len(result.views)))
    summary_table.add_row("存储过程", str(len(result.procedures)))
    summary_table.add_row("函数", str(len(result.functions)))
    summary_table.add_row("外键约束", str(result.foreign_key_count))
    summary_table.add_row("数据行", str(result.row_count))
    summary_table.add_row("耗时 (秒)", f"{result.elapsed:.2f}")

    console.print(summary_table)

    if result.path:
        console.print("\n[bold cyan]生成的文件:[/bold cyan]")
        console.print(f"  📄 {result.path}")


if __name__ == "__main__":
    main()
