import sqlite3
from typing import List, Optional, Sequence, Tuple

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from cortex.config import STORE_KEY
from cortex.db import init_db, read_value, write_value
from cortex.models import Topic

_topics_adapter = TypeAdapter(List[Topic])

class TopicStore:
    """
    Sole owner of the topic collection.

    Readers get an immutable snapshot; every change goes through `commit`,
    which swaps the collection and writes the whole array once.
    """

    def __init__(self, key: str = STORE_KEY):
        self.key = key
        self._topics: Tuple[Topic, ...] = ()

    def load(self) -> Tuple[Topic, ...]:
        init_db()
        payload = read_value(self.key)

        if payload is None:
            self._topics = ()
        else:
            try:
                self._topics = tuple(_topics_adapter.validate_json(payload))
            except ValidationError as e:
                logger.error(f"Stored topics under '{self.key}' are unreadable, starting empty: {e}")
                self._topics = ()

        logger.info(f"Loaded {len(self._topics)} topics from the store.")

        return self._topics

    def snapshot(self) -> Tuple[Topic, ...]:
        return self._topics

    def get(self, topic_id: str) -> Optional[Topic]:
        return next((topic for topic in self._topics if topic.id == topic_id), None)

    def commit(self, topics: Sequence[Topic]) -> Tuple[Topic, ...]:
        self._topics = tuple(topics)

        try:
            write_value(self.key, _topics_adapter.dump_json(list(self._topics), by_alias=True).decode("utf-8"))
        except sqlite3.Error:
            logger.exception(f"Failed to persist {len(self._topics)} topics.")

        return self._topics

topic_store = TopicStore()
