"""
Message Harvester - Collects tracking URLs from unread Gmail messages
"""

import re
import json
import base64
import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Optional, Callable

from harvester.errors import UrlNotFoundError
from harvester.models import ExtractedUrl, HarvestConfig, HarvestResult, MessageRef


logger = logging.getLogger(__name__)


class MessageHarvester:
    """Pages through unread messages, extracts one URL each and marks them read"""

    def __init__(
        self,
        service,  # Gmail API service object
        config: HarvestConfig,
        progress_callback: Optional[Callable] = None
    ):
        self.service = service
        self.config = config
        self.progress_callback = progress_callback
        self.url_regex = re.compile(config.url_pattern, re.IGNORECASE)
        self.query = self.with_unread_filter(config.query)

        # Accumulated (url, thread_id) pairs for the current run
        self.extracted: List[ExtractedUrl] = []

    # === Main Entry Point ===

    async def harvest(self) -> HarvestResult:
        """Run the harvest loop, then dedupe and write the URLs to disk"""
        await self._report_progress("harvest_started", {"query": self.query})

        self.extracted.clear()
        messages_processed = 0
        pages_processed = 0
        previous_ids = None

        while True:
            refs = await self._fetch_message_page()

            if not refs:
                break

            page_ids = [ref.id for ref in refs]
            if page_ids == previous_ids:
                # Marking read did not take these messages out of the query
                logger.warning(f"Query returned the same {len(page_ids)} messages again, stopping")
                break
            previous_ids = page_ids

            for ref in refs:
                body = await self._get_message_body(ref.id)
                url = self.extract_url(body, ref.id)
                self.extracted.append(ExtractedUrl(url=url, thread_id=ref.thread_id))
                messages_processed += 1

                await self._report_progress("message_processed", {
                    "message_id": ref.id,
                    "thread_id": ref.thread_id,
                    "url": url,
                    "processed_messages": messages_processed
                })

            await self._mark_read([ref.id for ref in refs])
            pages_processed += 1

            await self._report_progress("page_marked_read", {
                "page": pages_processed,
                "message_count": len(refs)
            })

        urls = [item.url for item in self.dedupe_by_thread(self.extracted)]
        logger.info(f"The urls array has {len(urls)} urls")

        self._write_urls(urls)

        result = HarvestResult(
            urls=urls,
            messages_processed=messages_processed,
            pages_processed=pages_processed,
            output_path=self.config.output_path
        )
        await self._report_progress("harvest_completed", {
            "url_count": len(urls),
            "processed_messages": messages_processed,
            "pages": pages_processed,
            "output_path": self.config.output_path
        })

        return result

    # === Gmail API Calls ===

    async def _fetch_message_page(self) -> List[MessageRef]:
        """List the next page of matching messages"""
        # No page token: messages marked read drop out of the query
        results = await asyncio.to_thread(
            lambda: self.service.users().messages().list(
                userId=self.config.user_id,
                q=self.query
            ).execute()
        )

        messages = results.get('messages') or []
        logger.debug(f"Fetched page of {len(messages)} messages")

        return [MessageRef(id=m['id'], thread_id=m['threadId']) for m in messages]

    async def _get_message_body(self, message_id: str) -> str:
        """Fetch a full message and return its decoded body"""
        message = await asyncio.to_thread(
            lambda: self.service.users().messages().get(
                userId=self.config.user_id,
                id=message_id,
                format='full'
            ).execute()
        )

        return self.decode_body(message.get('payload', {}))

    async def _mark_read(self, message_ids: List[str]) -> None:
        """Remove the unread label from every message in one batch call"""
        await asyncio.to_thread(
            lambda: self.service.users().messages().batchModify(
                userId=self.config.user_id,
                body={
                    'ids': message_ids,
                    'removeLabelIds': [self.config.unread_label]
                }
            ).execute()
        )
        logger.debug(f"Marked {len(message_ids)} messages as read")

    # === Query & Extraction ===

    @staticmethod
    def with_unread_filter(query: str) -> str:
        """Append is:unread so messages marked read leave the result set"""
        if 'is:unread' in query.lower().split():
            return query
        return f'{query} is:unread'.strip()

    def extract_url(self, body: str, message_id: str) -> str:
        """Return the first tracking URL in the body, or raise UrlNotFoundError"""
        match = self.url_regex.search(body)
        if not match:
            raise UrlNotFoundError(message_id)
        return match.group(0)

    @staticmethod
    def decode_body(payload: Dict) -> str:
        """Decode the primary body, falling back to the first non-empty part"""
        data = payload.get('body', {}).get('data')

        if not data:
            parts = MessageHarvester._flatten_parts(payload.get('parts', []))
            html_parts = [p for p in parts if p.get('mimeType') == 'text/html']
            for part in html_parts + parts:
                data = part.get('body', {}).get('data')
                if data:
                    break

        if not data:
            return ''

        # Gmail returns base64url without padding
        padded = data + '=' * (-len(data) % 4)
        return base64.urlsafe_b64decode(padded).decode('utf-8', errors='replace')

    @staticmethod
    def _flatten_parts(parts: List[Dict]) -> List[Dict]:
        flat = []
        for part in parts:
            flat.append(part)
            flat.extend(MessageHarvester._flatten_parts(part.get('parts', [])))
        return flat

    # === Results ===

    @staticmethod
    def dedupe_by_thread(items: List[ExtractedUrl]) -> List[ExtractedUrl]:
        """Keep the first extracted URL seen for each thread"""
        seen = set()
        unique = []
        for item in items:
            if item.thread_id in seen:
                continue
            seen.add(item.thread_id)
            unique.append(item)
        return unique

    def _write_urls(self, urls: List[str]) -> None:
        """Overwrite the output file with the URL list as JSON"""
        Path(self.config.output_path).write_text(json.dumps(urls))
        logger.info(f"Wrote {len(urls)} urls to {self.config.output_path}")

    # === Progress ===

    async def _report_progress(self, event: str, data: Dict) -> None:
        """Send progress update if callback is set"""
        if self.progress_callback:
            await self.progress_callback(event, data)
