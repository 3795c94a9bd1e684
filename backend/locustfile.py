from locust import HttpUser, task, between

class FastAPIUser(HttpUser):
    host = "http://localhost:8000"
    wait_time = between(1, 2)

    @task
    def create_topic_endpoint(self):
        endpoint = "/topics"

        payload = {
            "name": "Bitcoin: A Peer-to-Peer Electronic Cash System",
            "context": """
                Digital signatures provide part of the solution, but the main
                benefits are lost if a trusted third party is still required to prevent double-spending.
                The network timestamps transactions by hashing them into an ongoing chain of
                hash-based proof-of-work.
            """,
            "examDate": None
        }

        response = self.client.post(endpoint, json=payload)

        if response.status_code == 200:
            print(f"Request {endpoint} successful: {response.json()['topic']['id']}")
        else:
            print(f"Request {endpoint} failed with status {response.status_code}: {response.text}")

    @task(3)
    def dashboard_endpoints(self):
        for endpoint in ("/dashboard/upcoming", "/dashboard/workload", "/dashboard/heatmap"):
            response = self.client.get(endpoint)
            if response.status_code != 200:
                print(f"Request {endpoint} failed with status {response.status_code}: {response.text}")
