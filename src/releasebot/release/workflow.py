"""ReleaseWorkflow - Creates the CRP issue of a release and sets Fix Versions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import date
from typing import TYPE_CHECKING

from releasebot.changelog import build_changelog_document, group_changelog
from releasebot.jira import Version
from releasebot.release.issue import build_crp_issue_fields
from releasebot.release.models import FixVersionError, FixVersionErrorKind, FixVersionReport
from releasebot.slack import Attachment, Notification

if TYPE_CHECKING:
    from releasebot.changelog import ChangelogSection
    from releasebot.jira import CreatedIssue, JiraClient
    from releasebot.release.config import ReleaseConfig
    from releasebot.release.models import Release
    from releasebot.slack import Notify

logger = logging.getLogger(__name__)


def report_notification(report: FixVersionReport, version_name: str) -> Notification:
    """Slack-ready summary of a Fix Version report.

    Whitelist misses are warnings, every other failure is an error.
    """
    attachments = tuple(
        Attachment.warning(error.message)
        if error.kind is FixVersionErrorKind.NOT_IN_WHITELIST
        else Attachment.error(error.message)
        for error in report.errors
    )
    return Notification(text=report.status_text(version_name), attachments=attachments)


class ReleaseWorkflow:
    """Runs the CRP ticket process for a release.

    Phase 1 creates the CRP issue and returns it. Phase 2 then runs as a
    background job: it creates the release's version on every board found
    in the changelog and adds it to the Fix Version field of each ticket.
    Phase 2 failures never reach the caller of ``execute``; they are
    collected in a FixVersionReport sent through ``notify``.

    Every Jira call goes through the client's dispatcher, so the fan-out
    over boards and tickets still performs one request at a time.
    """

    def __init__(self, jira: JiraClient, config: ReleaseConfig) -> None:
        """Initialize the workflow.

        Args:
            jira: Jira client, shared by all workflow runs.
            config: Whitelist, repository mappings and CRP settings.
        """
        self.jira = jira
        self.config = config
        self._background: set[asyncio.Task[FixVersionReport]] = set()

    @property
    def pending_jobs(self) -> int:
        """Number of Fix Version jobs still running."""
        return len(self._background)

    async def execute(
        self,
        commit_messages: Sequence[str],
        release: Release,
        notify: Notify,
    ) -> CreatedIssue:
        """Create the CRP issue, then start setting Fix Versions in the background.

        Args:
            commit_messages: Commits between the previous release and this one.
            release: The release to track.
            notify: Receives the created issue link, then the Fix Version report.

        Returns:
            The created CRP issue.

        Raises:
            ValidationError: If the release's repository is not configured.
            JiraError: If the issue could not be created. Phase 2 is not started.
        """
        mapping = self.config.mapping_for(release)
        version_name = mapping.version_name(release)

        sections = group_changelog(commit_messages, release)
        changelog = build_changelog_document(sections, self.jira.base_url)
        fields = build_crp_issue_fields(self.config, mapping, release, changelog)

        logger.info("Creating CRP issue for %s (%s)", release.branch, release.repository.full_name)
        issue = await self.jira.create_issue(fields)
        url = self.jira.browse_url(issue.key)
        logger.info("CRP issue %s created for %s", issue.key, release.branch)

        await self._notify(notify, Notification(text=f"✅ CRP Ticket created: <{url}|{issue.key}>"))
        self._start_fix_versions(sections, version_name, notify)

        return issue

    async def wait_for_background(self) -> None:
        """Wait for every running Fix Version job to finish."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def create_and_link_fix_versions(
        self,
        sections: Sequence[ChangelogSection],
        version_name: str,
    ) -> FixVersionReport:
        """Create the version on each board and set it on each ticket.

        Boards are handled independently: a board missing from the
        whitelist or whose version cannot be created only affects its own
        tickets, and each ticket update fails on its own.

        Args:
            sections: Changelog sections; the unclassified one is skipped.
            version_name: Name of the Jira version to create.

        Returns:
            The merged report, in board order then ticket order.
        """
        boards = [
            (section.board, section.ticket_keys())
            for section in sections
            if section.board is not None and section.ticket_keys()
        ]
        reports = await asyncio.gather(
            *(self._fix_versions_for_board(board, tickets, version_name) for board, tickets in boards)
        )
        report = FixVersionReport.merge(*reports)
        logger.info(
            "Fix Version <%s> processed on %d boards with %d errors",
            version_name,
            len(boards),
            len(report.errors),
        )
        return report

    def _start_fix_versions(
        self,
        sections: Sequence[ChangelogSection],
        version_name: str,
        notify: Notify,
    ) -> None:
        task = asyncio.get_running_loop().create_task(
            self._run_fix_versions(sections, version_name, notify),
            name=f"fix-versions:{version_name}",
        )
        self._background.add(task)
        task.add_done_callback(self._on_job_done)

    async def _run_fix_versions(
        self,
        sections: Sequence[ChangelogSection],
        version_name: str,
        notify: Notify,
    ) -> FixVersionReport:
        report = await self.create_and_link_fix_versions(sections, version_name)
        if not report.succeeded:
            logger.warning("Fix Version <%s> errors:\n%s", version_name, report.description)
        await self._notify(notify, report_notification(report, version_name))
        return report

    def _on_job_done(self, task: asyncio.Task[FixVersionReport]) -> None:
        self._background.discard(task)
        if task.cancelled():
            logger.warning("Fix Version job %s was cancelled", task.get_name())
            return
        error = task.exception()
        if error is not None:
            logger.error("Fix Version job %s failed", task.get_name(), exc_info=error)

    async def _fix_versions_for_board(
        self,
        board: str,
        tickets: list[str],
        version_name: str,
    ) -> FixVersionReport:
        project_id = self.config.project_id_for(board)
        if project_id is None:
            logger.warning("Board %s is not whitelisted, skipping %d tickets", board, len(tickets))
            return FixVersionReport.failure(FixVersionError.not_in_whitelist(board))

        try:
            version = await self._ensure_version(project_id, version_name)
        except Exception as e:
            logger.warning("Failed to create version <%s> on board %s: %s", version_name, board, e)
            return FixVersionReport.failure(FixVersionError.version_creation_failed(board, _reason(e)))

        reports = await asyncio.gather(*(self._link_ticket(version, ticket) for ticket in tickets))
        return FixVersionReport.merge(*reports)

    async def _ensure_version(self, project_id: int, version_name: str) -> Version:
        if self.config.reuse_existing_versions:
            for existing in await self.jira.get_versions(project_id):
                if existing.name == version_name:
                    logger.info("Reusing version <%s> (#%s)", version_name, existing.id)
                    return existing

        return await self.jira.create_version(
            Version(
                project_id=project_id,
                name=version_name,
                description=version_name,
                start_date=date.today(),
            )
        )

    async def _link_ticket(self, version: Version, ticket: str) -> FixVersionReport:
        try:
            await self.jira.link_version(version, ticket)
        except Exception as e:
            logger.warning("Failed to set Fix Version on %s: %s", ticket, e)
            return FixVersionReport.failure(
                FixVersionError.fix_version_failed(ticket, url=self.jira.browse_url(ticket), reason=_reason(e))
            )
        return FixVersionReport()

    async def _notify(self, notify: Notify, notification: Notification) -> None:
        try:
            await notify(notification)
        except Exception as e:
            # Notifications are best effort, the workflow result stands
            logger.warning("Failed to deliver notification: %s", e)


def _reason(error: Exception) -> str:
    return str(error) or type(error).__name__
