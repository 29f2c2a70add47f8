from typing import Sequence, MutableSequence, Union, NamedTuple

from gcloud import GcloudInvoker
from util import Logger, GcloudError, ProjectLookupError, CreationError, LinkError


class BillingAccount(NamedTuple):
    id: str
    name: str
    open: bool


class CloudServices:

    def __init__(self, invoker: GcloudInvoker = None) -> None:
        super().__init__()
        self._invoker: GcloudInvoker = invoker if invoker is not None else GcloudInvoker()

    def get_active_account(self) -> Union[None, str]:
        account = self._invoker.run_value(['auth', 'list', '--filter=status:ACTIVE', '--format=value(account)'])
        if not account:
            return None

        # several active credentials are listed one per line; the first is the one in use
        return account.splitlines()[0].strip()

    def list_billing_accounts(self) -> Sequence[BillingAccount]:
        rows = self._invoker.run_csv(['billing', 'accounts', 'list',
                                      '--format=csv[no-heading](ACCOUNT_ID,NAME,OPEN)'])
        accounts: MutableSequence[BillingAccount] = []
        for row in rows if rows is not None else []:
            if len(row) < 3:
                continue
            accounts.append(BillingAccount(id=row[0], name=row[1], open=row[2] == 'True'))
        return accounts

    def billing_accounts_table(self) -> str:
        table = self._invoker.run_value(['billing', 'accounts', 'list'])
        return table if table else ''

    def describe_project(self, project_id: str) -> str:
        state = self._invoker.run_value(['projects', 'describe', project_id, '--format=value(lifecycleState)'])
        if state is None:
            raise ProjectLookupError(f"project '{project_id}' does not exist, or you have no access to it")
        return state

    def get_project_billing_account(self, project_id: str) -> Union[None, str]:
        name = self._invoker.run_value(['billing', 'projects', 'describe', project_id,
                                        '--format=value(billingAccountName)'])
        if not name:
            return None
        elif name.startswith('billingAccounts/'):
            return name[len('billingAccounts/'):]
        else:
            return name

    def get_billing_account_name(self, account_id: str) -> Union[None, str]:
        name = self._invoker.run_value(['billing', 'accounts', 'describe', account_id, '--format=value(displayName)'])
        return name if name else None

    def create_project(self, logger: Logger, project_id: str) -> None:
        try:
            self._invoker.run(logger, ['projects', 'create', project_id, f'--name={project_id}'])
        except GcloudError as e:
            raise CreationError(f"Failed to create project '{project_id}'. The ID might already be taken.") from e

    def link_billing_account(self, logger: Logger, project_id: str, account_id: str) -> None:
        try:
            self._invoker.run(logger, ['billing', 'projects', 'link', project_id, f'--billing-account={account_id}'])
        except GcloudError as e:
            raise LinkError(f"Failed to link billing account '{account_id}' to project '{project_id}'.") from e

    def set_default_project(self, logger: Logger, project_id: str) -> None:
        self._invoker.run(logger, ['config', 'set', 'project', project_id])
