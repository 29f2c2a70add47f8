import re
import secrets
from enum import Enum, auto, unique
from typing import Callable, Sequence, Tuple, Union

from colors import bold, underline, green, blue, yellow, red

import envfile
import util
from cloud import CloudServices, BillingAccount
from context import Context
from envfile import WriteMode
from util import Logger, AuthenticationError, NoBillingAccountError, NoTrialAccountError, ProjectLookupError, \
    InvalidIdentifierError

PROJECT_ID_PATTERN = re.compile(r'^[a-z][a-z0-9-]{4,28}[a-z0-9]$')

PROJECT_ID_RULES = ("Project ID must:\n"
                    "  - Be 6 to 30 characters\n"
                    "  - Start with a lowercase letter\n"
                    "  - Contain only lowercase letters, digits, and hyphens\n"
                    "  - Not end with a hyphen")


def validate_project_id(project_id: str) -> str:
    if not PROJECT_ID_PATTERN.match(project_id):
        raise InvalidIdentifierError(f"Invalid project ID '{project_id}'. {PROJECT_ID_RULES}")
    return project_id


def generate_project_id(prefix: str = 'workshop-') -> str:
    return prefix + secrets.token_hex(6)


@unique
class Outcome(Enum):
    ALREADY_CONFIGURED = auto()
    LINKED_EXISTING = auto()
    CREATED = auto()


class Onboarding:

    def __init__(self,
                 context: Context,
                 svc: CloudServices = None,
                 prompt: Callable[[Logger, str, str], str] = util.prompt) -> None:
        super().__init__()
        self._context: Context = context
        self._svc: CloudServices = svc if svc is not None else CloudServices()
        self._prompt: Callable[[Logger, str, str], str] = prompt

    def check_authentication(self) -> str:
        with Logger(f":key: {underline('Checking gcloud authentication:')}") as logger:
            logger.info(f"Verifying you are logged in to Google Cloud...")
            account = self._svc.get_active_account()
            if not account:
                raise AuthenticationError(
                    "You are not authenticated with Google Cloud!\n"
                    "\n"
                    "Please authenticate first by running one of the following commands:\n"
                    "\n"
                    "  Option 1 - If using Cloud Shell:\n"
                    "    gcloud auth login --no-launch-browser\n"
                    "\n"
                    "  Option 2 - For local development:\n"
                    "    gcloud auth login\n"
                    "\n"
                    "After authenticating, run this script again.")
            logger.info(green(f":heavy_check_mark: Authenticated as: {account}"))
            return account

    def select_trial_billing_account(self) -> BillingAccount:
        """
        Selects the trial billing account to use for the workshop project.

        Trial accounts are those that are open, and whose name contains the trial marker (eg. "Trial"). When more than
        one account qualifies, the last one in the listing order is selected. Note that the listing order is whatever
        the provider returns; it is not guaranteed to put the most recently created account last.
        """
        marker: str = self._context.trial_marker
        with Logger(f":credit_card: {underline('Checking for trial billing account:')}") as logger:
            logger.info(f"Searching for trial billing accounts...")
            accounts: Sequence[BillingAccount] = self._svc.list_billing_accounts()
            if not accounts:
                raise NoBillingAccountError("No billing accounts found!\n"
                                            "\n"
                                            "This workshop requires a Google Cloud trial billing account.\n"
                                            "Please ensure you have claimed your trial credit first.")

            selected: Union[None, BillingAccount] = None
            count: int = 0
            logger.info(f"Found trial billing accounts:")
            logger.info("-------------------------------------------")
            for account in accounts:
                if marker in account.name and account.open:
                    count += 1
                    selected = account
                    logger.info(f"  {green(f'[{count}]')} {account.name}")
                    logger.info(f"       ID: {account.id}")
            logger.info("-------------------------------------------")

            if selected is None:
                raise NoTrialAccountError(f"No active trial billing account found!\n"
                                          f"\n"
                                          f"This workshop requires an active Google Cloud trial billing account.\n"
                                          f"\n"
                                          f"Possible reasons:\n"
                                          f"  - You haven't claimed your free trial credit yet\n"
                                          f"  - Your trial billing account is closed/expired (OPEN: False)\n"
                                          f"\n"
                                          f"Your current billing accounts:\n"
                                          f"{self._svc.billing_accounts_table()}\n"
                                          f"\n"
                                          f"Note: Trial accounts with OPEN: False are expired and cannot be used.")

            logger.info(green(f":heavy_check_mark: Trial billing account found!"))
            logger.info(f"  Name: {bold(selected.name)}")
            logger.info(f"  ID:   {bold(selected.id)}")
            return selected

    def validate_existing_project(self) -> Tuple[Union[None, Outcome], Union[None, str]]:
        """
        Checks the project recorded in the environment file (if any).

        Returns (ALREADY_CONFIGURED, id) if that project exists and is linked to a trial billing account, and
        (LINKED_EXISTING, id) if it exists but has no billing account linked (so only linking is needed). Otherwise
        returns (None, None), meaning a new project must be created.
        """
        env_file = self._context.env_file_path
        project_id = envfile.read_value(env_file, self._context.project_key)
        if not project_id:
            return None, None

        with Logger(f":mag: {underline('Found existing project in ' + env_file.name + ':')}") as logger:
            logger.info(f"Project ID: {bold(project_id)}")
            logger.info(f"Validating project setup...")

            try:
                state = self._svc.describe_project(project_id)
            except ProjectLookupError as e:
                logger.info(red(f":x: {e.message}"))
                logger.info(f"The project ID in {env_file.name} is invalid or has been deleted.")
                logger.info(f"Creating a new project...")
                return None, None

            if state and state != 'ACTIVE':
                logger.info(red(f":x: Project is {state} (must be ACTIVE)"))
                logger.info(f"Creating a new project...")
                return None, None
            logger.info(green(f":heavy_check_mark: Project exists in Google Cloud"))

            billing_account_id = self._svc.get_project_billing_account(project_id)
            if not billing_account_id:
                logger.warn(f":warning: Project exists but has no billing account linked")
                logger.info(f"Linking trial billing account to this project...")
                return Outcome.LINKED_EXISTING, project_id

            billing_name = self._svc.get_billing_account_name(billing_account_id)
            if billing_name and self._context.trial_marker in billing_name:
                logger.info(green(f":heavy_check_mark: Linked to trial billing account: {billing_name}"))
                self._display_summary(logger=logger,
                                      title=":heavy_check_mark: Project Already Set Up!",
                                      project_id=project_id,
                                      billing_account_id=billing_account_id)
                logger.info(f"Your environment is ready. No action needed!")
                logger.info(f"To use a different project, remove {self._context.project_key} from {env_file.name} "
                            f"and re-run this script.")
                logger.info('')
                logger.info(f"Activating project...")
                self._svc.set_default_project(logger, project_id)
                logger.info(green(f":heavy_check_mark: Project activated: {project_id}"))
                return Outcome.ALREADY_CONFIGURED, project_id

            logger.warn(f":warning: Project is linked to non-trial billing: {billing_name}")
            logger.info(f"This workshop requires a trial billing account.")
            logger.info(f"Creating a new project with trial billing...")
            return None, None

    def create_project(self) -> str:
        with Logger(f":hammer: {underline('Create a new GCP project:')}") as logger:
            default_project_id = generate_project_id(self._context.project_prefix)
            logger.info(f"Suggested project ID: {green(default_project_id)}")
            project_id = self._prompt(logger, "Enter project ID (press Enter for suggested):", default_project_id)
            validate_project_id(project_id)

            logger.info(f"Creating project: {bold(project_id)}...")
            self._svc.create_project(logger, project_id)
            logger.info(green(f":heavy_check_mark: Project created successfully!"))
            return project_id

    def link_billing(self, project_id: str, account: BillingAccount) -> None:
        with Logger(f":link: {underline('Link trial billing account:')}") as logger:
            logger.info(f"Linking billing account {bold(account.id)} to project {bold(project_id)}...")
            self._svc.link_billing_account(logger, project_id, account.id)
            logger.info(green(f":heavy_check_mark: Billing account linked successfully!"))

    def set_default_project(self, project_id: str) -> None:
        with Logger(f":pushpin: {underline('Setting as default project:')}") as logger:
            self._svc.set_default_project(logger, project_id)
            logger.info(green(f":heavy_check_mark: Default project set to: {project_id}"))

    def save_project(self, project_id: str) -> WriteMode:
        env_file = self._context.env_file_path
        env_template = self._context.env_template_path
        key = self._context.project_key
        with Logger(f":floppy_disk: {underline('Saving to ' + env_file.name + ' file:')}") as logger:
            mode: WriteMode = envfile.write_value(env_file, env_template, key, project_id)
            if mode == WriteMode.UPDATED:
                logger.info(f"Updated {key} in existing {env_file.name}")
            elif mode == WriteMode.APPENDED:
                logger.info(f"Appended {key} to existing {env_file.name}")
            elif mode == WriteMode.FROM_TEMPLATE:
                logger.info(f"Created {env_file.name} from {env_template.name} template")
            else:
                logger.info(f"Created new {env_file.name}")
            logger.info(green(f":heavy_check_mark: Project ID saved to {env_file.name} file!"))
            return mode

    def _display_summary(self, logger: Logger, title: str, project_id: str, billing_account_id: str,
                         env_file: str = None) -> None:
        logger.info(blue("============================================"))
        logger.info(green(f"  {title}"))
        logger.info(blue("============================================"))
        logger.info(f"  Project ID:      {green(project_id)}")
        logger.info(f"  Billing Account: {green(billing_account_id)}")
        if env_file:
            logger.info(f"  Environment:     {green(env_file)}")
        logger.info(blue("============================================"))
        logger.info('')

    def run(self) -> Outcome:
        self.check_authentication()
        account: BillingAccount = self.select_trial_billing_account()

        outcome, project_id = self.validate_existing_project()
        if outcome == Outcome.ALREADY_CONFIGURED:
            return outcome
        elif outcome == Outcome.LINKED_EXISTING:
            with Logger(f":recycle: {underline('Using existing project:')}") as logger:
                logger.info(f"Project ID: {bold(project_id)}")
                logger.info(green(f":heavy_check_mark: Skipping project creation"))
        else:
            project_id: str = self.create_project()
            outcome: Outcome = Outcome.CREATED

        self.link_billing(project_id, account)
        self.set_default_project(project_id)
        self.save_project(project_id)

        with Logger(spacious=False, indent_amount=0) as logger:
            self._display_summary(logger=logger,
                                  title=":tada: Setup Complete!",
                                  project_id=project_id,
                                  billing_account_id=account.id,
                                  env_file=self._context.env_file_path.name)
            logger.info(f"You can now proceed with the workshop!")
            logger.info(f"To verify, run: {yellow('gcloud config get-value project')}")
        return outcome
