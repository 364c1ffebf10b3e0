"""
WebSocket 엔드포인트
장비 상태 실시간 업데이트를 위한 WebSocket 연결
"""
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from netwatch_manager.services.websocket_manager import websocket_manager

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    장비 상태 실시간 업데이트를 위한 WebSocket 연결

    폴러가 상태 변경 또는 첫 관측을 기록하면 메시지를 받습니다.
    메시지 형식:
    {
        "type": "device_status",
        "device_id": 1,
        "ip": "192.168.1.10",
        "status": "up" | "down",
        "since": "2024-01-01T09:00:00" | null
    }
    """
    await websocket_manager.connect(websocket)
    try:
        # 연결 유지 (클라이언트가 연결을 끊을 때까지 대기)
        while True:
            data = await websocket.receive_text()
            logger.debug(f"WebSocket 메시지 수신: {data}")
    except WebSocketDisconnect:
        websocket_manager.disconnect(websocket)
        logger.info("WebSocket 연결이 정상적으로 종료됨")
    except Exception as e:
        logger.error(f"WebSocket 오류: {e}", exc_info=True)
        websocket_manager.disconnect(websocket)
