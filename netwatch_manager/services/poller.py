"""
Netwatch 상태 폴러

한 주기(cycle) 동안:
  1. SystemConfig 조회 (미설정이면 건너뜀)
  2. 원격 장비에서 규칙 목록을 한 번만 조회
  3. 로컬 장비를 순서대로 돌며 상태/이력 반영 (장비 단위 commit)

어떤 실패도 스케줄러를 멈추지 않는다. 다음 주기에 다시 시도한다.
"""
import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from netwatch_manager import crud, models, schemas
from netwatch_manager.core.config import LOCAL_TZ, get_now, settings
from netwatch_manager.core.constants import REMOTE_UP_SENTINEL, STATUS_DOWN, STATUS_UP
from netwatch_manager.db.session import SessionLocal
from netwatch_manager.services.netwatch import (
    build_channel_from_config,
    classify_error,
    fetch_rules,
    is_configured,
)
from netwatch_manager.services.netwatch.exceptions import NetwatchConnectionError, NetwatchError
from netwatch_manager.services.websocket_manager import websocket_manager

logger = logging.getLogger(__name__)

POLL_JOB_ID = "netwatch_status_poll"
DEFAULT_POLLING_INTERVAL_SECONDS = 30

TRANSITION = "transition"
FIRST_OBSERVATION = "first_observation"
REFRESHED = "refreshed"


def derive_status(rule: schemas.WatchRule) -> str:
    return STATUS_UP if rule.status == REMOTE_UP_SENTINEL else STATUS_DOWN


def apply_observation(device: models.Device, new_status: str, now: datetime) -> Optional[str]:
    """관측된 상태를 장비에 반영하고 결과 종류를 반환 (변경 없으면 None).

    순서대로 평가:
      1. 상태 변경 -> status, last_seen, status_since 갱신
      2. status_since 없음 (첫 관측) -> status_since 설정, up이면 last_seen 갱신
      3. 계속 up -> last_seen 만 갱신 (이력 추가 안 함)
    """
    if device.status != new_status:
        device.status = new_status
        device.last_seen = now
        device.status_since = now
        return TRANSITION
    if device.status_since is None:
        device.status_since = now
        if new_status == STATUS_UP:
            device.last_seen = now
        return FIRST_OBSERVATION
    if new_status == STATUS_UP:
        device.last_seen = now
        return REFRESHED
    return None


class StatusPoller:
    """원격 netwatch 상태를 주기적으로 로컬 장비 상태에 반영하는 폴러"""

    def __init__(
        self,
        session_factory=SessionLocal,
        channel_builder: Callable = build_channel_from_config,
        broadcaster=websocket_manager,
        interval_seconds: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.channel_builder = channel_builder
        self.broadcaster = broadcaster
        # None이면 start() 시점에 SystemConfig에서 한 번만 읽는다
        self.interval_seconds = interval_seconds
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._cycle_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self.scheduler is not None

    async def start(self):
        """즉시 한 번 폴링한 뒤 고정 주기 작업을 등록"""
        if self.scheduler is not None:
            return
        await self.poll_once()

        if self.interval_seconds is None:
            self.interval_seconds = await self._load_interval()

        self.scheduler = AsyncIOScheduler(timezone=LOCAL_TZ)
        self.scheduler.add_job(
            self.poll_once,
            trigger=IntervalTrigger(seconds=self.interval_seconds, timezone=LOCAL_TZ),
            id=POLL_JOB_ID,
            name="Netwatch status poll",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(f"[poller] Status poller started (interval: {self.interval_seconds}s)")

    async def stop(self):
        """스케줄러 중지. 진행 중인 주기는 끝까지 수행되도록 기다린다."""
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=False)
            self.scheduler = None
        async with self._cycle_lock:
            pass
        logger.info("[poller] Status poller stopped")

    async def _load_interval(self) -> int:
        try:
            async with self.session_factory() as db:
                config = await crud.system_config.get_system_config(db)
        except SQLAlchemyError as e:
            logger.error(f"[poller] Failed to read polling interval, using default: {e}")
            return DEFAULT_POLLING_INTERVAL_SECONDS
        if config is None or not config.polling_interval_seconds:
            return DEFAULT_POLLING_INTERVAL_SECONDS
        return config.polling_interval_seconds

    async def poll_once(self) -> schemas.PollReport:
        """한 주기 실행. 예외를 올리지 않고 PollReport로 결과를 반환."""
        async with self._cycle_lock:
            report = schemas.PollReport()
            try:
                await self._run_cycle(report)
            except NetwatchConnectionError as e:
                logger.warning(f"[poller] Remote device unreachable, will retry on next cycle: {e}")
                report.success = False
                report.error = classify_error(e, timeout=settings.REMOTE_CONNECT_TIMEOUT).message
            except NetwatchError as e:
                logger.error(f"[poller] Remote device error, will retry on next cycle: {e}")
                report.success = False
                report.error = classify_error(e).message
            except SQLAlchemyError as e:
                logger.error(f"[poller] Store error, cycle aborted: {e}", exc_info=True)
                report.success = False
                report.error = f"Store error: {e}"
            except Exception as e:
                logger.error(f"[poller] Unexpected polling error: {e}", exc_info=True)
                report.success = False
                report.error = classify_error(e).message
            return report

    async def _run_cycle(self, report: schemas.PollReport):
        logger.info("[poller] Starting netwatch poll")
        async with self.session_factory() as db:
            config = await crud.system_config.get_system_config(db)
        if not is_configured(config):
            logger.info("[poller] Remote device not configured - skipping poll")
            report.success = False
            report.error = "Remote device not configured"
            return

        logger.info(f"[poller] Connecting to {config.remote_host}:{config.remote_port}")
        channel = self.channel_builder(config)
        loop = asyncio.get_running_loop()
        rules = await loop.run_in_executor(None, fetch_rules, channel)
        report.rules_seen = len(rules)
        logger.info(f"[poller] Retrieved {len(rules)} netwatch entries")

        # 같은 host가 여러 번 나오면 첫 번째 규칙 사용
        rules_by_host: Dict[str, schemas.WatchRule] = {}
        for rule in rules:
            rules_by_host.setdefault(rule.host, rule)

        async with self.session_factory() as db:
            await self._reconcile(db, rules_by_host, report)

        logger.info(
            f"[poller] Poll completed: {report.devices_checked} devices, "
            f"{report.transitions} changed, {report.first_observations} first seen, "
            f"{len(report.missing_hosts)} missing"
        )

    async def _reconcile(self, db: AsyncSession, rules_by_host: Dict[str, schemas.WatchRule],
                         report: schemas.PollReport):
        devices = await crud.device.get_devices(db)
        device_ids: List[int] = [device.id for device in devices]
        now = get_now()

        for device_id in device_ids:
            # rollback 이후에도 만료된 객체를 안전하게 다시 읽도록 identity map 조회
            device = await db.get(models.Device, device_id)
            if device is None:
                continue
            name, ip, previous = device.name, device.ip, device.status
            report.devices_checked += 1

            rule = rules_by_host.get(ip)
            if rule is None:
                report.missing_hosts.append(ip)
                logger.debug(f"[poller] Device {name} ({ip}) not found in netwatch results")
                continue

            try:
                outcome = await self._apply(db, device, derive_status(rule), now)
            except SQLAlchemyError:
                await db.rollback()
                raise
            except Exception as e:
                await db.rollback()
                logger.error(f"[poller] Failed to update {name} ({ip}), skipping: {e}", exc_info=True)
                report.skipped_devices.append(ip)
                continue

            if outcome == TRANSITION:
                report.transitions += 1
                logger.info(f"[poller] Device {name} ({ip}) status changed from {previous} to {device.status}")
            elif outcome == FIRST_OBSERVATION:
                report.first_observations += 1
                logger.info(f"[poller] Device {name} ({ip}) first status recorded: {device.status}")
            elif outcome == REFRESHED:
                report.refreshed += 1

            if outcome in (TRANSITION, FIRST_OBSERVATION):
                await self._broadcast(device)

    async def _apply(self, db: AsyncSession, device: models.Device, new_status: str, now: datetime) -> Optional[str]:
        outcome = apply_observation(device, new_status, now)
        if outcome is None:
            return None
        if outcome in (TRANSITION, FIRST_OBSERVATION):
            await crud.status_history.create_status_history(db, schemas.StatusHistoryCreate(
                device_id=device.id,
                device_ip=device.ip,
                status=new_status,
                timestamp=now,
            ))
        db.add(device)
        await db.commit()
        return outcome

    async def _broadcast(self, device: models.Device):
        try:
            await self.broadcaster.broadcast_device_status(
                device.id, device.ip, device.status, device.status_since
            )
        except Exception as e:
            logger.warning(f"[poller] Failed to broadcast status of {device.ip}: {e}")


# 전역 폴러 인스턴스
status_poller = StatusPoller()
