import random
import time

from locust import HttpUser, task

PROGRAMS = ["Personal Loan", "Education Loan", "Vehicle Loan", "Gym Membership"]


class BenefitRequestUser(HttpUser):

    @task
    def submit_request_and_wait_for_review(self):
        emp_id = f"EMP{random.randint(1, 100000):06d}"
        create_request = {
            "name": "Load Test",
            "email": f"{emp_id.lower()}@example.com",
            "empId": emp_id,
            "program": random.choice(PROGRAMS),
            "date": time.strftime("%Y-%m-%d"),
            "loan_type": "Personal",
            "amount": "10000",
            "reason": "performance test",
        }
        document = ("payslip.pdf", b"%PDF-1.4\n%%EOF\n", "application/pdf")
        creation_response = self.client.post(
            "/api/requests", data=create_request, files={"document": document}
        )
        request_id = creation_response.json()['id']

        self.client.get(f"/api/requests/emp/{emp_id}", name="/api/requests/emp/{empId}")
        self.client.put(
            f"/api/requests/{request_id}",
            json={"status": random.choice(["Approved", "Rejected"])},
            name="/api/requests/{id}",
        )

        def _wait_for_request_status(
                expected_statuses, timeout_seconds=30, interval_seconds=1
        ):
            seconds_waited = 0
            while seconds_waited <= timeout_seconds:
                response = self.client.get(f"/api/requests/{request_id}", name="/api/requests/{id}")
                if response.json()['status'] in expected_statuses:
                    return
                else:
                    time.sleep(interval_seconds)
                    seconds_waited += interval_seconds
                    print(
                        f"Waiting {interval_seconds} second(s) for a reviewed status on "
                        f"request {request_id}"
                    )
        _wait_for_request_status({'Approved', 'Rejected'})
