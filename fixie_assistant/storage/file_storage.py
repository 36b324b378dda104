"""
Файловое хранилище состояния разговоров.
"""
import json
import os
import threading
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional, List

logger = logging.getLogger(__name__)

ACTIVE_STATUS = "in_progress"


class FileStorage:
    """Класс для работы с файловым хранилищем."""
    def __init__(self, data_dir: str = "data", filename: str = "conversations.json"):
        self.data_dir = data_dir
        self.filename = filename
        self.filepath = os.path.join(data_dir, filename)
        self.lock = threading.RLock()
        self.data = {"conversations": {}}
        os.makedirs(data_dir, exist_ok=True)
        self._load_data()
    def _load_data(self) -> None:
        try:
            if os.path.exists(self.filepath):
                with open(self.filepath, 'r') as f:
                    self.data = json.load(f)
                self.data.setdefault("conversations", {})
                logger.info(f"Данные загружены из {self.filepath}")
            else:
                logger.info(f"Файл {self.filepath} не существует, используем пустое хранилище")
        except (OSError, ValueError) as e:
            logger.error(f"Ошибка при загрузке данных: {e}")
            self.data = {"conversations": {}}
    def _save_data(self) -> None:
        try:
            if os.path.exists(self.filepath):
                backup_path = f"{self.filepath}.bak"
                with open(self.filepath, 'r') as src:
                    with open(backup_path, 'w') as dst:
                        dst.write(src.read())
            with open(self.filepath, 'w') as f:
                json.dump(self.data, f, indent=2)
            logger.debug(f"Данные сохранены в {self.filepath}")
        except OSError as e:
            logger.error(f"Ошибка при сохранении данных: {e}")
    def add_conversation(self, thread_id: str, assistant_id: str, run_id: str) -> None:
        with self.lock:
            self.data["conversations"][thread_id] = {
                "status": ACTIVE_STATUS,
                "last_activity": datetime.now(timezone.utc).isoformat(),
                "assistant_id": assistant_id,
                "run_id": run_id,
                "detail": None,
            }
            self._save_data()
    def set_status(self, thread_id: str, status: str, detail: Optional[str] = None) -> None:
        with self.lock:
            conversation = self.data["conversations"].get(thread_id)
            if conversation is None:
                logger.warning(f"Попытка установить статус для несуществующего разговора {thread_id}")
                return
            conversation["status"] = status
            conversation["detail"] = detail
            conversation["last_activity"] = datetime.now(timezone.utc).isoformat()
            self._save_data()
    def get_conversation(self, thread_id: str) -> Optional[Dict[str, Any]]:
        with self.lock:
            conversation = self.data["conversations"].get(thread_id)
            return dict(conversation) if conversation else None
    def get_inactive_conversations(self, hours: int = 5) -> List[str]:
        with self.lock:
            current_time = datetime.now(timezone.utc)
            inactive = []
            for thread_id, conversation in self.data["conversations"].items():
                if conversation["status"] != ACTIVE_STATUS:
                    continue
                last_activity = datetime.fromisoformat(conversation["last_activity"])
                if (current_time - last_activity).total_seconds() / 3600 >= hours:
                    inactive.append(thread_id)
            return inactive
