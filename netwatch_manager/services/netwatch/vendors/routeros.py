# netwatch/vendors/routeros.py
import ipaddress
import re
import socket
import logging
from typing import Any, Dict, List, Optional

import paramiko
import pandas as pd

from netwatch_manager import schemas
from ..interface import NetwatchInterface
from ..exceptions import (
    NetwatchAuthenticationError,
    NetwatchCommandError,
    NetwatchConnectionError,
    NetwatchTimeoutError,
)

# Paramiko 로깅 설정
logging.getLogger("paramiko").setLevel(logging.WARNING)

# 규칙 하나당 한 줄: ".id=*1;comment=core;host=10.0.0.1;interval=00:00:05;status=up;..."
LIST_RULES_COMMAND = ':foreach i in=[/tool netwatch find] do={:put [/tool netwatch get $i]}'
IDENTITY_COMMAND = '/system identity print'
RESOURCE_COMMAND = '/system resource print'

# 키=값 쌍 (값 안의 ';'는 다음 키가 나올 때까지 값으로 취급)
PAIR_PATTERN = re.compile(r'(?:^|;)([.\w-]+)=(.*?)(?=;[.\w-]+=|$)')
PRINT_FIELD_PATTERN = r'^\s*{field}:\s*(.+?)\s*$'

# RouterOS CLI가 명령 거부 시 출력하는 메시지
ERROR_MARKERS = (
    'failure:',
    'syntax error',
    'bad command name',
    'expected end of command',
    'input does not match',
    'no such item',
    'invalid value',
    'ambiguous value',
)


def find_error_line(output: str, error_output: str = '') -> Optional[str]:
    """CLI 오류 메시지 줄을 찾습니다.

    stderr는 전체를 검사하고, stdout은 오류 문구로 시작하는 줄만 본다.
    key=value 규칙 행(comment 등 사용자 입력 포함)은 검사하지 않는다.
    """
    for line in error_output.splitlines():
        if any(marker in line.lower() for marker in ERROR_MARKERS):
            return line.strip()
    for line in output.splitlines():
        stripped = line.strip()
        if not stripped or parse_rule_line(stripped):
            continue
        if stripped.lower().startswith(ERROR_MARKERS):
            return stripped
    return None


def parse_rule_line(line: str) -> Dict[str, str]:
    """netwatch get 결과 한 줄을 dict로 변환합니다."""
    return {key: value for key, value in PAIR_PATTERN.findall(line.strip())}


def parse_rule_output(output: str) -> pd.DataFrame:
    """netwatch 목록 출력을 DataFrame으로 변환합니다."""
    rows: List[Dict[str, str]] = []
    for line in output.splitlines():
        if '=' not in line:
            continue
        row = parse_rule_line(line)
        if row.get('.id') and row.get('host'):
            rows.append(row)
    df = pd.DataFrame(rows)
    if df.empty:
        return pd.DataFrame(columns=['id', 'host', 'comment', 'timeout', 'interval', 'up_script', 'down_script', 'status'])
    return df.rename(columns={'.id': 'id', 'up-script': 'up_script', 'down-script': 'down_script'})


def parse_print_field(output: str, field: str) -> Optional[str]:
    """'/system ... print' 출력에서 필드 값을 추출합니다."""
    match = re.search(PRINT_FIELD_PATTERN.format(field=re.escape(field)), output, re.MULTILINE)
    return match.group(1) if match else None


def quote_value(value: Any) -> str:
    """RouterOS CLI 문자열 리터럴로 변환합니다."""
    s = str(value)
    s = s.replace('\\', '\\\\').replace('"', '\\"').replace('$', '\\$')
    s = s.replace('\r', '').replace('\n', '\\n')
    return f'"{s}"'


def build_rule_arguments(spec: schemas.WatchRuleSpec) -> str:
    """add/set 명령 인자 (timeout은 ms, interval은 s 단위 접미사 사용)"""
    args = [
        f'host={_validate_host(spec.host)}',
        f'comment={quote_value(spec.comment)}',
        f'timeout={int(spec.timeout_ms)}ms',
        f'interval={int(spec.interval_s)}s',
    ]
    if spec.up_script:
        args.append(f'up-script={quote_value(spec.up_script)}')
    if spec.down_script:
        args.append(f'down-script={quote_value(spec.down_script)}')
    return ' '.join(args)


def _validate_host(host: str) -> str:
    try:
        return str(ipaddress.ip_address((host or '').strip()))
    except ValueError:
        raise NetwatchCommandError(f"netwatch host는 IP 주소여야 합니다: {host!r}")


def _validate_remote_id(remote_id: str) -> str:
    if not re.fullmatch(r'\*[0-9A-Fa-f]+', remote_id or ''):
        raise NetwatchCommandError(f"잘못된 netwatch 규칙 ID입니다: {remote_id}")
    return remote_id


class RouterOSNetwatch(NetwatchInterface):
    """RouterOS 장비의 /tool netwatch 를 SSH CLI로 다루는 구현체"""

    def __init__(self, hostname: str, username: str, password: str, port: int = 22, timeout: int = 10):
        super().__init__(hostname, username, password, port=port, timeout=timeout)
        self._client: Optional[paramiko.SSHClient] = None

    def connect(self) -> bool:
        client = paramiko.SSHClient()
        client.load_system_host_keys()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            client.connect(
                self.hostname,
                port=self.port,
                username=self.username,
                password=self._password,
                timeout=self.timeout,
                auth_timeout=self.timeout,
                banner_timeout=self.timeout,
                look_for_keys=False,
                allow_agent=False,
            )
        except paramiko.AuthenticationException as e:
            client.close()
            raise NetwatchAuthenticationError(f"Authentication failed for {self.username}@{self.hostname}: {e}") from e
        except (socket.timeout, TimeoutError) as e:
            client.close()
            raise NetwatchTimeoutError(f"Connection timed out to {self.hostname}:{self.port}") from e
        except paramiko.ssh_exception.NoValidConnectionsError as e:
            client.close()
            raise NetwatchConnectionError(f"Connection refused by {self.hostname}:{self.port} ({e})") from e
        except (paramiko.SSHException, OSError) as e:
            client.close()
            raise NetwatchConnectionError(f"Failed to connect to {self.hostname}:{self.port}: {e}") from e

        self._client = client
        self._connected = True
        self.logger.debug(f"Connected to {self.hostname}:{self.port}")
        return True

    def disconnect(self) -> bool:
        if self._client is not None:
            try:
                self._client.close()
            finally:
                self._client = None
        self._connected = False
        return True

    def _exec(self, command: str) -> str:
        if self._client is None:
            raise NetwatchConnectionError("Not connected to the remote device")
        try:
            _, stdout, stderr = self._client.exec_command(command, timeout=self.timeout)
            output = stdout.read().decode('utf-8', errors='replace')
            error_output = stderr.read().decode('utf-8', errors='replace')
        except (socket.timeout, TimeoutError) as e:
            raise NetwatchTimeoutError(f"Command timed out on {self.hostname}: {command}") from e
        except (paramiko.SSHException, OSError) as e:
            raise NetwatchConnectionError(f"Connection lost to {self.hostname}: {e}") from e

        error_line = find_error_line(output, error_output)
        if error_line is not None:
            raise NetwatchCommandError(f"Command rejected by {self.hostname}: {error_line}")
        return output

    def get_system_info(self) -> Dict[str, Any]:
        identity = parse_print_field(self._exec(IDENTITY_COMMAND), 'name') or 'Unknown'
        version = parse_print_field(self._exec(RESOURCE_COMMAND), 'version') or 'Unknown'
        return {'identity': identity, 'version': version}

    def export_watch_rules(self) -> pd.DataFrame:
        return parse_rule_output(self._exec(LIST_RULES_COMMAND))

    def create_rule(self, spec: schemas.WatchRuleSpec) -> None:
        self._exec(f'/tool netwatch add {build_rule_arguments(spec)}')

    def update_rule(self, remote_id: str, spec: schemas.WatchRuleSpec) -> None:
        remote_id = _validate_remote_id(remote_id)
        # 생략된 스크립트는 빈 값으로 초기화
        args = build_rule_arguments(spec)
        if not spec.up_script:
            args += ' up-script=""'
        if not spec.down_script:
            args += ' down-script=""'
        self._exec(f'/tool netwatch set {remote_id} {args}')

    def remove_rule(self, remote_id: str) -> None:
        remote_id = _validate_remote_id(remote_id)
        self._exec(f'/tool netwatch remove {remote_id}')
