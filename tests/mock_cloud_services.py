from typing import Mapping, Sequence, Tuple, MutableSequence, MutableMapping

from cloud import CloudServices, BillingAccount
from gcloud import GcloudInvoker
from util import Logger, GcloudError, ProjectLookupError, CreationError, LinkError


class MockGcloudInvoker(GcloudInvoker):

    def __init__(self, responses: Mapping[str, Tuple[int, str, str]] = None) -> None:
        super().__init__('gcloud')
        self._mock_responses: Mapping[str, Tuple[int, str, str]] = responses if responses is not None else {}
        self.invocations: MutableSequence[str] = []

    def _invoke(self, args: Sequence[str], stderr_logger: Logger = None,
                stdout_logger: Logger = None) -> Tuple[int, str, str]:
        command = ' '.join(args)
        self.invocations.append(command)
        return_code, stdout, stderr = self._mock_responses.get(command, (1, '', f"ERROR: unexpected '{command}'"))
        if stdout_logger and stdout:
            stdout_logger.info(stdout)
        if stderr_logger and stderr:
            stderr_logger.info(stderr)
        return return_code, stdout, stderr


class MockCloudServices(CloudServices):

    def __init__(self,
                 active_account: str = 'participant@example.com',
                 billing_accounts: Sequence[BillingAccount] = None,
                 projects: Mapping[str, str] = None,
                 project_billing: Mapping[str, str] = None,
                 fail_create: bool = False,
                 fail_link: bool = False,
                 fail_set_default: bool = False) -> None:
        super().__init__(MockGcloudInvoker())
        self._active_account: str = active_account
        self._billing_accounts: Sequence[BillingAccount] = billing_accounts if billing_accounts is not None else []
        self._projects: MutableMapping[str, str] = dict(projects) if projects is not None else {}
        self._project_billing: MutableMapping[str, str] = dict(project_billing) if project_billing is not None else {}
        self._fail_create: bool = fail_create
        self._fail_link: bool = fail_link
        self._fail_set_default: bool = fail_set_default
        self.created_projects: MutableSequence[str] = []
        self.links: MutableSequence[Tuple[str, str]] = []
        self.default_project: str = None

    def get_active_account(self):
        return self._active_account

    def list_billing_accounts(self) -> Sequence[BillingAccount]:
        return self._billing_accounts

    def billing_accounts_table(self) -> str:
        lines = ['ACCOUNT_ID  NAME  OPEN  MASTER_ACCOUNT_ID']
        lines.extend([f"{a.id}  {a.name}  {a.open}" for a in self._billing_accounts])
        return '\n'.join(lines)

    def describe_project(self, project_id: str) -> str:
        if project_id not in self._projects:
            raise ProjectLookupError(f"project '{project_id}' does not exist, or you have no access to it")
        return self._projects[project_id]

    def get_project_billing_account(self, project_id: str):
        return self._project_billing.get(project_id)

    def get_billing_account_name(self, account_id: str):
        for account in self._billing_accounts:
            if account.id == account_id:
                return account.name
        return None

    def create_project(self, logger: Logger, project_id: str) -> None:
        if self._fail_create or project_id in self._projects:
            raise CreationError(f"Failed to create project '{project_id}'. The ID might already be taken.")
        self._projects[project_id] = 'ACTIVE'
        self.created_projects.append(project_id)

    def link_billing_account(self, logger: Logger, project_id: str, account_id: str) -> None:
        if self._fail_link:
            raise LinkError(f"Failed to link billing account '{account_id}' to project '{project_id}'.")
        self._project_billing[project_id] = account_id
        self.links.append((project_id, account_id))

    def set_default_project(self, logger: Logger, project_id: str) -> None:
        if self._fail_set_default:
            raise GcloudError(f"gcloud command terminated with exit code #1!")
        self.default_project = project_id
